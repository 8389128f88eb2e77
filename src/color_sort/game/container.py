"""
Container model for the color sort puzzle.

A container is an immutable bounded stack of colored units. The last unit in
``units`` is the top, the end that gets poured.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..exceptions import MalformedPuzzleError
from .colors import Color


@dataclass(frozen=True)
class Container:
    id: str
    capacity: int
    units: Tuple[Color, ...] = ()

    def __post_init__(self):
        if not isinstance(self.units, tuple):
            object.__setattr__(self, "units", tuple(self.units))
        if self.capacity <= 0:
            raise MalformedPuzzleError(
                f"Container {self.id!r} must have positive capacity, got {self.capacity}"
            )
        if len(self.units) > self.capacity:
            raise MalformedPuzzleError(
                f"Container {self.id!r} holds {len(self.units)} units "
                f"but capacity is {self.capacity}"
            )

    @classmethod
    def empty(cls, id: str, capacity: int = 4) -> "Container":
        return cls(id=id, capacity=capacity)

    @classmethod
    def with_colors(
        cls, id: str, colors: Iterable[Color], capacity: int = 4
    ) -> "Container":
        return cls(id=id, capacity=capacity, units=tuple(colors))

    @property
    def is_empty(self) -> bool:
        return not self.units

    @property
    def is_full(self) -> bool:
        return len(self.units) == self.capacity

    @property
    def is_uniform(self) -> bool:
        """True when every unit has the same color (vacuously for 0 or 1 units)."""
        if not self.units:
            return True
        first = self.units[0]
        return all(unit == first for unit in self.units)

    @property
    def is_solved(self) -> bool:
        """Full and single-colored. Used by the quality heuristics."""
        return self.is_full and self.is_uniform

    @property
    def top_color(self) -> Optional[Color]:
        return self.units[-1] if self.units else None

    @property
    def top_run_length(self) -> int:
        """Length of the contiguous run of the top color, scanning downward."""
        if not self.units:
            return 0

        top = self.units[-1]
        count = 0
        for unit in reversed(self.units):
            if unit != top:
                break
            count += 1
        return count

    @property
    def free_space(self) -> int:
        return self.capacity - len(self.units)

    def push(self, colors: Iterable[Color]) -> "Container":
        """Return a new container with ``colors`` stacked on top."""
        return Container(self.id, self.capacity, self.units + tuple(colors))

    def pop_top(self, count: int) -> Tuple["Container", Tuple[Color, ...]]:
        """Return a new container without its top ``count`` units, and those units."""
        if count < 0 or count > len(self.units):
            raise MalformedPuzzleError(
                f"Cannot remove {count} units from container {self.id!r} "
                f"holding {len(self.units)}"
            )
        split = len(self.units) - count
        return Container(self.id, self.capacity, self.units[:split]), self.units[split:]

    def color_key(self) -> str:
        """Comma separated color sequence, bottom to top. Empty string if empty."""
        return ",".join(unit.value for unit in self.units)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "capacity": self.capacity,
            "colors": [unit.value for unit in self.units],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Container":
        try:
            colors = tuple(Color.from_name(name) for name in data.get("colors", []))
        except KeyError as e:
            raise MalformedPuzzleError(f"Unknown color {e.args[0]!r}") from e
        return cls(id=str(data["id"]), capacity=int(data.get("capacity", 4)), units=colors)

    def __str__(self) -> str:
        if self.is_empty:
            return f"Container {self.id}: [empty]"
        names = ", ".join(unit.value for unit in self.units)
        return f"Container {self.id}: [{names}] ({len(self.units)}/{self.capacity})"
