import json
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..exceptions import MalformedPuzzleError
from ..logger import logger
from .colors import Color
from .state import PuzzleState


class Difficulty(Enum):
    """Ordered difficulty tiers: easy < medium < hard < expert."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_ORDER.index(self)

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    def __lt__(self, other: "Difficulty") -> bool:
        if not isinstance(other, Difficulty):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def ordered(cls) -> List["Difficulty"]:
        return list(_DIFFICULTY_ORDER)

    @classmethod
    def from_name(cls, name: str) -> "Difficulty":
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            raise MalformedPuzzleError(f"Unknown difficulty {name!r}") from e


_DIFFICULTY_ORDER = (
    Difficulty.EASY,
    Difficulty.MEDIUM,
    Difficulty.HARD,
    Difficulty.EXPERT,
)

_COMPLEXITY_MULTIPLIER = {
    Difficulty.EASY: 0.5,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.5,
    Difficulty.EXPERT: 2.0,
}


@dataclass(frozen=True)
class Level:
    """Immutable puzzle definition handed to presentation and persistence.

    ``star_thresholds`` are three ascending move counts: the cutoffs for
    3, 2 and 1 stars respectively.
    """

    id: str
    name: str
    initial_state: PuzzleState
    difficulty: Difficulty
    move_limit: Optional[int] = None
    description: Optional[str] = None
    star_thresholds: Optional[Tuple[int, int, int]] = None

    def __post_init__(self):
        if self.move_limit is not None and self.move_limit <= 0:
            raise MalformedPuzzleError(
                f"Level {self.id!r} move_limit must be positive, got {self.move_limit}"
            )

        if self.star_thresholds is not None:
            thresholds = tuple(self.star_thresholds)
            if len(thresholds) != 3:
                raise MalformedPuzzleError(
                    f"Level {self.id!r} needs exactly three star thresholds, "
                    f"got {len(thresholds)}"
                )
            if any(t <= 0 for t in thresholds):
                raise MalformedPuzzleError(
                    f"Level {self.id!r} star thresholds must be positive: {thresholds}"
                )
            if not thresholds[0] <= thresholds[1] <= thresholds[2]:
                raise MalformedPuzzleError(
                    f"Level {self.id!r} star thresholds must be ascending: {thresholds}"
                )
            object.__setattr__(self, "star_thresholds", thresholds)

    @property
    def container_count(self) -> int:
        return len(self.initial_state)

    @property
    def total_units(self) -> int:
        return self.initial_state.total_units

    @property
    def complexity_score(self) -> float:
        """Rough size-based score; tighter move limits and higher tiers score higher."""
        score = self.container_count * 2 + self.total_units * 0.5
        if self.move_limit is not None:
            score += self.total_units / self.move_limit * 5
        return score * _COMPLEXITY_MULTIPLIER[self.difficulty]

    def calculate_stars(self, move_count: int) -> int:
        """Star rating (0-3) for finishing in ``move_count`` moves."""
        if self.star_thresholds is None:
            return 0

        three, two, one = self.star_thresholds
        if move_count <= three:
            return 3
        if move_count <= two:
            return 2
        if move_count <= one:
            return 1
        return 0

    @classmethod
    def tutorial(cls, id: str = "tutorial_1") -> "Level":
        """Small hand-made level used for demos and smoke tests."""
        state = PuzzleState.from_colors(
            [
                [Color.RED, Color.BLUE, Color.RED],
                [Color.BLUE, Color.RED, Color.BLUE],
                [],
                [],
            ],
            capacity=4,
            ids=["1", "2", "3", "4"],
        )
        return cls(
            id=id,
            name="Tutorial: Color Sorting",
            initial_state=state,
            difficulty=Difficulty.EASY,
            move_limit=12,
            description="Sort the colors so each container has only one color",
            star_thresholds=(6, 8, 10),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty.value,
        }

        if self.description is not None:
            result["description"] = self.description
        if self.move_limit is not None:
            result["move_limit"] = self.move_limit
        if self.star_thresholds is not None:
            result["star_thresholds"] = list(self.star_thresholds)

        result["containers"] = self.initial_state.to_list()
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Level":
        try:
            thresholds = data.get("star_thresholds")
            return cls(
                id=str(data["id"]),
                name=str(data["name"]),
                initial_state=PuzzleState.from_list(data["containers"]),
                difficulty=Difficulty.from_name(data["difficulty"]),
                move_limit=data.get("move_limit"),
                description=data.get("description"),
                star_thresholds=tuple(thresholds) if thresholds is not None else None,
            )
        except KeyError as e:
            raise MalformedPuzzleError(f"Level record is missing field {e.args[0]!r}") from e

    def save_to_file(self, filename: str) -> None:
        with open(filename, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_from_file(cls, filename: str) -> "Level":
        with open(filename, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __str__(self) -> str:
        return (
            f"Level: {self.name} ({self.id}, {self.difficulty.value}, "
            f"{self.container_count} containers)"
        )


@dataclass
class LevelPack:
    """Levels grouped by theme, in play order."""

    name: str = "Level Pack"
    themes: Dict[str, List[Level]] = field(default_factory=dict)

    def add_theme(self, theme: str, levels: Sequence[Level]) -> None:
        self.themes[theme] = list(levels)

    def levels_for_theme(self, theme: str) -> List[Level]:
        if theme not in self.themes:
            raise KeyError(
                f"Unknown theme: {theme}. Available: {', '.join(self.themes)}"
            )
        return list(self.themes[theme])

    def all_levels(self) -> List[Level]:
        return [level for levels in self.themes.values() for level in levels]

    def get_level(self, level_id: str) -> Optional[Level]:
        for level in self.all_levels():
            if level.id == level_id:
                return level
        return None

    def get_level_by_number(self, theme: str, number: int) -> Optional[Level]:
        levels = self.themes.get(theme, [])
        if 1 <= number <= len(levels):
            return levels[number - 1]
        return None

    def levels_by_difficulty(self, difficulty: Difficulty) -> List[Level]:
        return [level for level in self.all_levels() if level.difficulty == difficulty]

    def statistics(self) -> Dict[str, Any]:
        by_difficulty = {d.value: 0 for d in Difficulty.ordered()}
        for level in self.all_levels():
            by_difficulty[level.difficulty.value] += 1
        return {
            "total_levels": len(self),
            "levels_by_theme": {theme: len(levels) for theme, levels in self.themes.items()},
            "levels_by_difficulty": by_difficulty,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "themes": {
                theme: [level.to_dict() for level in levels]
                for theme, levels in self.themes.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelPack":
        pack = cls(name=data.get("name", "Level Pack"))
        for theme, levels in data.get("themes", {}).items():
            pack.add_theme(theme, [Level.from_dict(level) for level in levels])
        return pack

    def save_to_directory(self, directory: str) -> None:
        """Write ``pack.json`` (index) plus one JSON file per theme."""
        os.makedirs(directory, exist_ok=True)

        index = {"name": self.name, "themes": {}}
        for theme, levels in self.themes.items():
            filename = f"{theme.replace(' ', '_').lower()}.json"
            index["themes"][theme] = filename
            with open(os.path.join(directory, filename), "w") as f:
                json.dump([level.to_dict() for level in levels], f, indent=2)

        with open(os.path.join(directory, "pack.json"), "w") as f:
            json.dump(index, f, indent=2)

        logger.bind(component="level_pack").info(
            f"Saved {len(self)} levels in {len(self.themes)} themes to {directory}"
        )

    @classmethod
    def load_from_directory(cls, directory: str) -> "LevelPack":
        with open(os.path.join(directory, "pack.json"), "r") as f:
            index = json.load(f)

        pack = cls(name=index.get("name", os.path.basename(directory)))
        for theme, filename in index.get("themes", {}).items():
            with open(os.path.join(directory, filename), "r") as f:
                records = json.load(f)
            pack.add_theme(theme, [Level.from_dict(record) for record in records])
        return pack

    def __len__(self) -> int:
        return sum(len(levels) for levels in self.themes.values())

    def __iter__(self):
        return iter(self.all_levels())
