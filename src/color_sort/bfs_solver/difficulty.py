"""
Difficulty scoring for color sort puzzles.
"""

from typing import Optional, Tuple

from ..game.levels import Difficulty, Level
from ..game.state import PuzzleState
from .validator import DIFFICULTY_MISMATCH, QualityFinding


class DifficultyScorer:
    """Heuristic difficulty estimate, independent of the declared tier."""

    @staticmethod
    def score_puzzle(state: PuzzleState) -> float:
        """Calculate difficulty score for a puzzle state.

        Args:
            state: Initial puzzle state

        Returns:
            Difficulty score clamped to [0, 100]
        """
        containers = state.containers

        score = 2.0 * len(containers)
        score += 3.0 * state.distinct_colors

        # More slack containers make a puzzle easier
        empty_ratio = state.empty_count / len(containers)
        score -= 10.0 * empty_ratio

        mixed = sum(1 for c in containers if not c.is_empty and not c.is_uniform)
        score += 2.0 * mixed

        return max(0.0, min(100.0, score))

    @staticmethod
    def get_difficulty_label(score: float) -> Difficulty:
        """Get difficulty tier from score.

        Args:
            score: Difficulty score

        Returns:
            Difficulty tier
        """
        if score <= 24:
            return Difficulty.EASY
        elif score <= 32:
            return Difficulty.MEDIUM
        elif score <= 40:
            return Difficulty.HARD
        else:
            return Difficulty.EXPERT

    @staticmethod
    def score_and_label(state: PuzzleState) -> Tuple[float, Difficulty]:
        """Calculate both score and label.

        Args:
            state: Initial puzzle state

        Returns:
            (score, label) tuple
        """
        score = DifficultyScorer.score_puzzle(state)
        label = DifficultyScorer.get_difficulty_label(score)
        return score, label

    @staticmethod
    def cross_check(level: Level) -> Optional[QualityFinding]:
        """Flag levels whose estimate sits more than one tier from the declared one."""
        score, label = DifficultyScorer.score_and_label(level.initial_state)
        if abs(label.rank - level.difficulty.rank) <= 1:
            return None

        return QualityFinding(
            DIFFICULTY_MISMATCH,
            f"Declared {level.difficulty.value} but estimated {label.value} "
            f"(score {score:.1f})",
        )
