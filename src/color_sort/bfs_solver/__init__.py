"""
BFS solver for color sort puzzles.

Finds the optimal move count of a puzzle state, validates levels and scores
their difficulty.
"""

from .difficulty import DifficultyScorer
from .solver import BFSResult, BFSSolver, SearchLimits, SearchOutcome
from .validator import (
    QualityFinding,
    ValidationResult,
    check_quality,
    quick_check,
    validate_state,
)

__all__ = [
    "BFSSolver",
    "BFSResult",
    "SearchLimits",
    "SearchOutcome",
    "DifficultyScorer",
    "QualityFinding",
    "ValidationResult",
    "check_quality",
    "quick_check",
    "validate_state",
]
