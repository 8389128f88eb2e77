"""
BFS solver for finding the optimal move count of a color sort puzzle.
"""

import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Optional, Set, Tuple

from ..game.moves import is_won, iter_successors
from ..game.state import PuzzleState
from ..logger import logger

DEFAULT_MAX_DEPTH = 50
DEFAULT_MAX_STATES = 5000


class SearchOutcome(Enum):
    """How a search ended."""

    SOLVED = "solved"
    NO_EMPTY_CONTAINER = "no_empty_container"
    STATE_LIMIT = "state_limit"
    DEPTH_LIMIT = "depth_limit"
    EXHAUSTED = "exhausted"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


_ERROR_MESSAGES = {
    SearchOutcome.NO_EMPTY_CONTAINER: "Level needs at least one empty container",
    SearchOutcome.STATE_LIMIT: "Search exceeded maximum states ({max_states})",
    SearchOutcome.DEPTH_LIMIT: "Search exceeded maximum depth ({max_depth})",
    SearchOutcome.EXHAUSTED: "Level is unsolvable",
    SearchOutcome.TIMEOUT: "Search exceeded time budget ({timeout_ms}ms)",
    SearchOutcome.CANCELLED: "Search was cancelled",
}


@dataclass(frozen=True)
class SearchLimits:
    """Bounds that stop a search early.

    ``timeout_ms`` is an optional wall-clock safety net. Leave it unset when
    results must not depend on host speed.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_states: int = DEFAULT_MAX_STATES
    timeout_ms: Optional[float] = None
    progress_interval: int = 1000

    def __post_init__(self):
        if self.max_depth <= 0:
            raise ValueError("max_depth must be positive")
        if self.max_states <= 0:
            raise ValueError("max_states must be positive")
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive when set")
        if self.progress_interval <= 0:
            raise ValueError("progress_interval must be positive")


@dataclass
class BFSResult:
    """Result of BFS solving."""

    outcome: SearchOutcome
    optimal_move_count: Optional[int]
    states_explored: int
    unique_states: int
    time_taken_ms: float
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.outcome == SearchOutcome.SOLVED

    @property
    def hit_limit(self) -> bool:
        """Search stopped on a bound; a larger budget might still succeed."""
        return self.outcome in (
            SearchOutcome.STATE_LIMIT,
            SearchOutcome.DEPTH_LIMIT,
            SearchOutcome.TIMEOUT,
        )

    @property
    def proven_unsolvable(self) -> bool:
        return self.outcome in (
            SearchOutcome.EXHAUSTED,
            SearchOutcome.NO_EMPTY_CONTAINER,
        )


class BFSSolver:
    """Breadth-first solver over the move graph of a puzzle state."""

    def __init__(self, limits: Optional[SearchLimits] = None):
        """Initialize BFS solver.

        Args:
            limits: Search bounds, defaults to depth 50 and 5000 states
        """
        self.limits = limits or SearchLimits()
        self.logger = logger.bind(component="bfs_solver")

    def solve(
        self,
        state: PuzzleState,
        should_cancel: Optional[Callable[[], bool]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> BFSResult:
        """Find the optimal number of moves that solves ``state``.

        Args:
            state: Initial puzzle state
            should_cancel: Polled once per frontier pop; returning True stops the search
            on_progress: Called with the explored-state count every
                ``limits.progress_interval`` pops

        Returns:
            BFSResult; every kind of "no" is an outcome, never an exception
        """
        start_time = time.perf_counter()

        if is_won(state):
            return BFSResult(SearchOutcome.SOLVED, 0, 0, 1, 0.0)

        if not state.has_empty_container:
            return self._result(SearchOutcome.NO_EMPTY_CONTAINER, 0, 1, start_time)

        limits = self.limits
        initial_key = state.fingerprint()

        # Queue entries: (state, depth)
        queue: Deque[Tuple[PuzzleState, int]] = deque([(state, 0)])
        visited: Set[str] = {initial_key}
        states_explored = 0
        depth_pruned = False

        while queue:
            if states_explored >= limits.max_states:
                return self._result(
                    SearchOutcome.STATE_LIMIT, states_explored, len(visited), start_time
                )

            if should_cancel is not None and should_cancel():
                return self._result(
                    SearchOutcome.CANCELLED, states_explored, len(visited), start_time
                )

            if limits.timeout_ms is not None:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                if elapsed_ms > limits.timeout_ms:
                    return self._result(
                        SearchOutcome.TIMEOUT, states_explored, len(visited), start_time
                    )

            current, depth = queue.popleft()
            states_explored += 1

            if on_progress is not None and states_explored % limits.progress_interval == 0:
                on_progress(states_explored)

            if is_won(current):
                self.logger.debug(
                    f"Solved in {depth} moves after {states_explored} states"
                )
                return self._result(
                    SearchOutcome.SOLVED,
                    states_explored,
                    len(visited),
                    start_time,
                    optimal_move_count=depth,
                )

            if depth >= limits.max_depth:
                depth_pruned = True
                continue

            for _, successor in iter_successors(current):
                key = successor.fingerprint()
                if key in visited:
                    continue
                visited.add(key)
                queue.append((successor, depth + 1))

        outcome = SearchOutcome.DEPTH_LIMIT if depth_pruned else SearchOutcome.EXHAUSTED
        return self._result(outcome, states_explored, len(visited), start_time)

    def _result(
        self,
        outcome: SearchOutcome,
        states_explored: int,
        unique_states: int,
        start_time: float,
        optimal_move_count: Optional[int] = None,
    ) -> BFSResult:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        error = None
        if outcome != SearchOutcome.SOLVED:
            error = _ERROR_MESSAGES[outcome].format(
                max_states=self.limits.max_states,
                max_depth=self.limits.max_depth,
                timeout_ms=self.limits.timeout_ms,
            )
            self.logger.debug(f"{error} after {states_explored} states")

        return BFSResult(
            outcome=outcome,
            optimal_move_count=optimal_move_count,
            states_explored=states_explored,
            unique_states=unique_states,
            time_taken_ms=elapsed_ms,
            error=error,
        )
