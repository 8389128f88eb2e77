"""
Puzzle state model, move rules and level records for the color sort game.
"""

from .colors import Color
from .container import Container
from .levels import Difficulty, Level, LevelPack
from .moves import (
    Move,
    apply_move,
    can_move,
    has_any_valid_move,
    is_won,
    iter_successors,
    move_count,
    valid_destinations,
    valid_moves,
)
from .state import PuzzleState

__all__ = [
    "Color",
    "Container",
    "PuzzleState",
    "Move",
    "can_move",
    "move_count",
    "apply_move",
    "is_won",
    "has_any_valid_move",
    "valid_destinations",
    "valid_moves",
    "iter_successors",
    "Difficulty",
    "Level",
    "LevelPack",
]
