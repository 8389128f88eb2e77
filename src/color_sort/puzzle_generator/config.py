"""
Generation parameters per difficulty tier.

Passed into the LevelGenerator explicitly so tests can inject their own tables.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from ..bfs_solver.solver import SearchLimits
from ..game.colors import Color
from ..game.levels import Difficulty


@dataclass(frozen=True)
class TierParams:
    """Generation parameters for one difficulty tier."""

    name: str
    colors_range: Tuple[int, int]
    empty_containers: int
    capacity: int
    # Each color's units are cut into chunks of these sizes before mixing
    chunk_size_range: Tuple[int, int]
    search_limits: SearchLimits
    move_limit_percent: int
    min_optimal_moves: int = 1

    def __post_init__(self):
        low, high = self.colors_range
        if low < 1 or high < low:
            raise ValueError(f"{self.name}: invalid colors_range {self.colors_range}")
        if high > len(Color):
            raise ValueError(f"{self.name}: at most {len(Color)} colors are available")
        if self.empty_containers < 1:
            raise ValueError(f"{self.name}: needs at least one empty container")
        if self.capacity <= 0:
            raise ValueError(f"{self.name}: capacity must be positive")

        chunk_low, chunk_high = self.chunk_size_range
        if chunk_low < 1 or chunk_high < chunk_low or chunk_high > self.capacity:
            raise ValueError(
                f"{self.name}: invalid chunk_size_range {self.chunk_size_range}"
            )
        if self.move_limit_percent < 100:
            raise ValueError(f"{self.name}: move_limit_percent must be at least 100")
        if self.min_optimal_moves < 1:
            raise ValueError(f"{self.name}: min_optimal_moves must be positive")

    @property
    def max_containers(self) -> int:
        return self.colors_range[1] + self.empty_containers


DEFAULT_TIERS: Dict[Difficulty, TierParams] = {
    Difficulty.EASY: TierParams(
        name="Easy",
        colors_range=(2, 3),
        empty_containers=2,
        capacity=4,
        chunk_size_range=(2, 2),
        search_limits=SearchLimits(max_depth=50, max_states=5000),
        move_limit_percent=200,
        min_optimal_moves=2,
    ),
    Difficulty.MEDIUM: TierParams(
        name="Medium",
        colors_range=(3, 4),
        empty_containers=2,
        capacity=4,
        chunk_size_range=(1, 2),
        search_limits=SearchLimits(max_depth=50, max_states=10000),
        move_limit_percent=150,
        min_optimal_moves=4,
    ),
    Difficulty.HARD: TierParams(
        name="Hard",
        colors_range=(4, 5),
        empty_containers=2,
        capacity=4,
        chunk_size_range=(1, 2),
        search_limits=SearchLimits(max_depth=50, max_states=30000),
        move_limit_percent=130,
        min_optimal_moves=6,
    ),
    Difficulty.EXPERT: TierParams(
        name="Expert",
        colors_range=(5, 6),
        empty_containers=2,
        capacity=4,
        chunk_size_range=(1, 1),
        search_limits=SearchLimits(max_depth=60, max_states=60000),
        move_limit_percent=120,
        min_optimal_moves=8,
    ),
}


@dataclass
class GeneratorConfig:
    """Configuration for level generation."""

    tiers: Dict[Difficulty, TierParams] = field(
        default_factory=lambda: dict(DEFAULT_TIERS)
    )
    max_attempts: int = 50
    max_theme_attempts: int = 3
    # Reject candidates with quality findings instead of attaching warnings
    strict_quality: bool = False
    # 3-star, 2-star, 1-star cutoffs as percentages of the optimal move count
    star_percentages: Tuple[int, int, int] = (105, 120, 140)
    # Share of a themed pack per tier, easy to expert
    pack_distribution: Tuple[int, int, int, int] = (20, 30, 30, 20)
    # Skip a level that exhausts its attempts instead of failing the theme
    skip_failed_levels: bool = False
    workers: int = 1

    def __post_init__(self):
        missing = [d.value for d in Difficulty.ordered() if d not in self.tiers]
        if missing:
            raise ValueError(f"tiers missing for: {', '.join(missing)}")
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if self.max_theme_attempts <= 0:
            raise ValueError("max_theme_attempts must be positive")
        if len(self.star_percentages) != 3 or list(self.star_percentages) != sorted(
            self.star_percentages
        ):
            raise ValueError("star_percentages must be three ascending values")
        if len(self.pack_distribution) != 4 or sum(self.pack_distribution) != 100:
            raise ValueError("pack_distribution must be four shares summing to 100")

    def tier(self, difficulty: Difficulty) -> TierParams:
        return self.tiers[difficulty]

    def search_limits_for(self, difficulty: Difficulty) -> SearchLimits:
        return self.tiers[difficulty].search_limits

    def with_search_limits(self, limits: SearchLimits) -> "GeneratorConfig":
        """Copy of this config with every tier searching under ``limits``."""
        tiers = {d: replace(t, search_limits=limits) for d, t in self.tiers.items()}
        return replace(self, tiers=tiers)
