"""
Error types raised by the color sort engine.
"""

from typing import Dict, Optional


class ColorSortError(Exception):
    """Base class for all engine errors."""


class MalformedPuzzleError(ColorSortError, ValueError):
    """Raised when a container, puzzle state or level is built from bad input."""


class InvalidMoveError(ColorSortError, ValueError):
    """Raised when apply_move is called on a pair that cannot pour."""

    def __init__(self, from_index: int, to_index: int, reason: str):
        self.from_index = from_index
        self.to_index = to_index
        self.reason = reason
        super().__init__(f"Invalid move {from_index} -> {to_index}: {reason}")


class GenerationError(ColorSortError, RuntimeError):
    """Raised when the level generator runs out of attempts."""

    def __init__(
        self,
        message: str,
        difficulty: Optional[str] = None,
        level_number: Optional[int] = None,
        theme: Optional[str] = None,
        attempts: int = 0,
        failure_reasons: Optional[Dict[str, int]] = None,
    ):
        self.difficulty = difficulty
        self.level_number = level_number
        self.theme = theme
        self.attempts = attempts
        self.failure_reasons = dict(failure_reasons or {})
        super().__init__(message)
