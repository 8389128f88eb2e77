"""
Immutable puzzle state: an ordered tuple of containers.

Every move produces a new PuzzleState, so states can be hashed, compared and
shared between search frontiers freely.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import MalformedPuzzleError
from .colors import Color
from .container import Container

CONTAINER_SEPARATOR = "|"


@dataclass(frozen=True)
class PuzzleState:
    containers: Tuple[Container, ...]

    def __post_init__(self):
        if not isinstance(self.containers, tuple):
            object.__setattr__(self, "containers", tuple(self.containers))
        if not self.containers:
            raise MalformedPuzzleError("Puzzle state must contain at least one container")

        ids = [container.id for container in self.containers]
        if len(set(ids)) != len(ids):
            duplicated = sorted({cid for cid in ids if ids.count(cid) > 1})
            raise MalformedPuzzleError(f"Duplicate container ids: {duplicated}")

    @classmethod
    def from_colors(
        cls,
        layout: Sequence[Sequence[Color]],
        capacity: int = 4,
        ids: Optional[Sequence[str]] = None,
    ) -> "PuzzleState":
        """Build a state from bottom-to-top color lists sharing one capacity.

        Args:
            layout: One color sequence per container
            capacity: Capacity of every container
            ids: Optional container ids, defaults to c0, c1, ...

        Returns:
            PuzzleState with containers in layout order
        """
        if ids is None:
            ids = [f"c{i}" for i in range(len(layout))]
        if len(ids) != len(layout):
            raise MalformedPuzzleError("ids and layout must have the same length")

        return cls(
            tuple(
                Container(id=cid, capacity=capacity, units=tuple(colors))
                for cid, colors in zip(ids, layout)
            )
        )

    def __len__(self) -> int:
        return len(self.containers)

    def __getitem__(self, index: int) -> Container:
        return self.containers[index]

    def __iter__(self) -> Iterator[Container]:
        return iter(self.containers)

    def fingerprint(self) -> str:
        """Canonical encoding of the color layout, in container order.

        Containers are joined by ``|`` and units by ``,`` using full color
        names, so an empty container shows up as an empty slot between
        separators and two distinct layouts never share a fingerprint.
        Container ids and capacities are not part of the key.
        """
        return CONTAINER_SEPARATOR.join(c.color_key() for c in self.containers)

    def replace(self, updates: Mapping[int, Container]) -> "PuzzleState":
        """Return a new state with the containers at the given indices swapped out."""
        return PuzzleState(
            tuple(updates.get(i, c) for i, c in enumerate(self.containers))
        )

    def color_counts(self) -> Counter:
        counts: Counter = Counter()
        for container in self.containers:
            counts.update(container.units)
        return counts

    @property
    def distinct_colors(self) -> int:
        return len(self.color_counts())

    @property
    def total_units(self) -> int:
        return sum(len(c.units) for c in self.containers)

    @property
    def empty_count(self) -> int:
        return sum(1 for c in self.containers if c.is_empty)

    @property
    def has_empty_container(self) -> bool:
        return any(c.is_empty for c in self.containers)

    def to_list(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.containers]

    @classmethod
    def from_list(cls, data: Sequence[Mapping[str, Any]]) -> "PuzzleState":
        return cls(tuple(Container.from_dict(dict(item)) for item in data))

    def __str__(self) -> str:
        return "\n".join(str(c) for c in self.containers)
