"""
Move rules for the color sort puzzle.

Pure functions: they never mutate their inputs and hold no state, so the
presentation layer and the solver can call them from anywhere.
"""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from ..exceptions import InvalidMoveError
from .colors import Color
from .container import Container
from .state import PuzzleState


@dataclass(frozen=True)
class Move:
    """A single pour between two containers."""

    from_index: int
    to_index: int
    from_id: str
    to_id: str
    color: Color
    count: int

    def __str__(self) -> str:
        return f"Move({self.count} x {self.color.value}: {self.from_id} -> {self.to_id})"


def can_move(source: Container, target: Container) -> bool:
    """Check whether ``source`` can pour into ``target``.

    Legal iff the source is non-empty, the target is not full, and the target
    is empty or shows the same top color as the source.
    """
    if source.is_empty:
        return False
    if target.is_full:
        return False
    if target.is_empty:
        return True
    return source.units[-1] == target.units[-1]


def move_count(source: Container, target: Container) -> int:
    """Number of units a pour transfers: the top run, capped by free space.

    Only meaningful when ``can_move(source, target)`` holds.
    """
    return min(source.top_run_length, target.free_space)


def _pour(state: PuzzleState, from_index: int, to_index: int) -> Tuple[PuzzleState, Move]:
    source = state.containers[from_index]
    target = state.containers[to_index]
    count = move_count(source, target)

    new_source, poured = source.pop_top(count)
    new_target = target.push(poured)

    move = Move(
        from_index=from_index,
        to_index=to_index,
        from_id=source.id,
        to_id=target.id,
        color=poured[-1],
        count=count,
    )
    return state.replace({from_index: new_source, to_index: new_target}), move


def apply_move(state: PuzzleState, from_index: int, to_index: int) -> PuzzleState:
    """Pour from one container into another and return the new state.

    Args:
        state: Current puzzle state
        from_index: Index of the source container
        to_index: Index of the target container

    Returns:
        New PuzzleState; containers not involved are the same objects

    Raises:
        InvalidMoveError: If the indices are equal or out of range, or the
            pour is not legal
    """
    size = len(state.containers)
    if from_index == to_index:
        raise InvalidMoveError(from_index, to_index, "source and target are the same container")
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise InvalidMoveError(
                from_index, to_index, f"index {index} out of range for {size} containers"
            )

    source = state.containers[from_index]
    target = state.containers[to_index]
    if not can_move(source, target):
        if source.is_empty:
            reason = "source container is empty"
        elif target.is_full:
            reason = "target container is full"
        else:
            reason = (
                f"top colors differ ({source.top_color.value} onto "
                f"{target.top_color.value})"
            )
        raise InvalidMoveError(from_index, to_index, reason)

    new_state, _ = _pour(state, from_index, to_index)
    return new_state


def is_won(state: PuzzleState) -> bool:
    """True iff every container is empty or holds a single color."""
    return all(container.is_uniform for container in state.containers)


def has_any_valid_move(state: PuzzleState) -> bool:
    """True iff at least one ordered pair of distinct containers can pour."""
    containers = state.containers
    for i, source in enumerate(containers):
        if source.is_empty:
            continue
        for j, target in enumerate(containers):
            if i != j and can_move(source, target):
                return True
    return False


def valid_destinations(state: PuzzleState, from_index: int) -> List[int]:
    """Indices of every container the given container can pour into."""
    source = state.containers[from_index]
    return [
        j
        for j, target in enumerate(state.containers)
        if j != from_index and can_move(source, target)
    ]


def valid_moves(state: PuzzleState) -> List[Move]:
    """All legal moves from ``state``, in (from, to) index order."""
    return [move for move, _ in iter_successors(state)]


def iter_successors(state: PuzzleState) -> Iterator[Tuple[Move, PuzzleState]]:
    """Yield (move, resulting state) for every legal ordered pair (i, j), i != j."""
    containers = state.containers
    for i, source in enumerate(containers):
        if source.is_empty:
            continue
        for j, target in enumerate(containers):
            if i == j or not can_move(source, target):
                continue
            new_state, move = _pour(state, i, j)
            yield move, new_state
