"""
Level validation: solvability via BFS plus non-fatal quality heuristics.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..game.moves import has_any_valid_move, is_won
from ..game.state import PuzzleState
from .solver import BFSResult, BFSSolver, SearchLimits, SearchOutcome

MAX_QUICK_CHECK_CONTAINERS = 12


@dataclass(frozen=True)
class QualityFinding:
    """Advisory issue attached to an otherwise valid result."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


TRIVIAL_START = "trivial_start"
FEW_COLORS = "few_colors"
ALREADY_SOLVED = "already_solved"
DIFFICULTY_MISMATCH = "difficulty_mismatch"


@dataclass
class ValidationResult:
    """Outcome of validating one puzzle state.

    ``is_solvable`` is the verdict; ``findings`` are advisory and never flip it.
    """

    is_solvable: bool
    outcome: SearchOutcome
    optimal_move_count: Optional[int] = None
    states_explored: int = 0
    error: Optional[str] = None
    findings: List[QualityFinding] = field(default_factory=list)

    @property
    def warning(self) -> Optional[str]:
        """Findings joined into a single message, or None."""
        if not self.findings:
            return None
        return "; ".join(f.message for f in self.findings)

    @property
    def has_warnings(self) -> bool:
        return bool(self.findings)

    def __str__(self) -> str:
        if not self.is_solvable:
            return f"Unsolvable: {self.error}"

        parts = [f"Solvable in {self.optimal_move_count} moves"]
        parts.append(f"({self.states_explored} states explored)")
        if self.findings:
            parts.append(f"Warning: {self.warning}")
        return " ".join(parts)


def check_quality(state: PuzzleState) -> List[QualityFinding]:
    """Heuristic quality findings for an initial state.

    Flags states where more than half of the full containers already start
    solved, and states with fewer than two distinct colors.
    """
    findings = []

    full = [c for c in state.containers if c.is_full]
    solved = [c for c in full if c.is_uniform]
    if full and len(solved) / len(full) > 0.5:
        findings.append(
            QualityFinding(
                TRIVIAL_START,
                f"More than 50% of full containers are already solved "
                f"({len(solved)}/{len(full)})",
            )
        )

    if state.distinct_colors < 2:
        findings.append(
            QualityFinding(FEW_COLORS, "Level has less than 2 different colors")
        )

    return findings


def quick_check(state: PuzzleState) -> bool:
    """Cheap filter for obviously broken states, no search involved."""
    if is_won(state):
        return True
    if not state.has_empty_container and not has_any_valid_move(state):
        return False
    return len(state) <= MAX_QUICK_CHECK_CONTAINERS


def validate_state(
    state: PuzzleState,
    limits: Optional[SearchLimits] = None,
    solver: Optional[BFSSolver] = None,
) -> ValidationResult:
    """Run the BFS solver and quality heuristics on an initial state.

    Args:
        state: Initial puzzle state
        limits: Search bounds, ignored when ``solver`` is given
        solver: Pre-built solver to reuse

    Returns:
        ValidationResult with verdict and findings
    """
    solver = solver or BFSSolver(limits)
    findings = check_quality(state)

    result: BFSResult = solver.solve(state)

    if result.found and result.optimal_move_count == 0:
        findings.append(QualityFinding(ALREADY_SOLVED, "Level is already solved"))

    return ValidationResult(
        is_solvable=result.found,
        outcome=result.outcome,
        optimal_move_count=result.optimal_move_count,
        states_explored=result.states_explored,
        error=result.error,
        findings=findings,
    )
