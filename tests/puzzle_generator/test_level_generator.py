"""
Tests for the level generator.
"""

import zlib

import pytest

from color_sort.bfs_solver.solver import BFSSolver, SearchLimits
from color_sort.exceptions import GenerationError
from color_sort.game.levels import Difficulty
from color_sort.game.moves import is_won
from color_sort.puzzle_generator import (
    DEFAULT_TIERS,
    GeneratorConfig,
    LevelGenerator,
    derive_seed,
    pack_distribution,
)


def easy_everywhere(**kwargs) -> GeneratorConfig:
    """Config whose every tier uses the cheap easy parameters."""
    tiers = {d: DEFAULT_TIERS[Difficulty.EASY] for d in Difficulty.ordered()}
    return GeneratorConfig(tiers=tiers, **kwargs)


class TestSeeds:
    """Test seed derivation and pack splits."""

    def test_derive_seed_without_theme(self):
        """Without a theme the seed is rank*10000 + level number."""
        assert derive_seed(Difficulty.EASY, 1) == 1
        assert derive_seed(Difficulty.MEDIUM, 3) == 10003
        assert derive_seed(Difficulty.EXPERT, 12) == 30012

    def test_derive_seed_is_stable(self):
        """Theme hashing uses crc32, not the per-process salted hash."""
        expected = zlib.crc32(b"ocean") * 1_000_000 + 1
        assert derive_seed(Difficulty.EASY, 1, "Ocean") == expected

    def test_salt_perturbs_seed(self):
        """Different salts give different seeds."""
        base = derive_seed(Difficulty.HARD, 5, "Space")
        assert derive_seed(Difficulty.HARD, 5, "Space", salt=1) != base
        assert derive_seed(Difficulty.HARD, 5, "Space", salt=0) == base

    def test_pack_distribution(self):
        """20/30/30/20 split, with the remainder on expert."""
        default = (20, 30, 30, 20)
        assert list(pack_distribution(50, default).values()) == [10, 15, 15, 10]
        assert list(pack_distribution(5, default).values()) == [1, 2, 2, 0]
        assert list(pack_distribution(7, default).values()) == [1, 2, 2, 2]
        assert sum(pack_distribution(33, default).values()) == 33


class TestGeneratorConfig:
    """Test configuration validation."""

    def test_default_tiers_scale(self):
        """Color counts, budgets and minimum lengths grow with difficulty."""
        tiers = [DEFAULT_TIERS[d] for d in Difficulty.ordered()]
        for easier, harder in zip(tiers, tiers[1:]):
            assert easier.colors_range[0] <= harder.colors_range[0]
            assert easier.search_limits.max_states <= harder.search_limits.max_states
            assert easier.min_optimal_moves < harder.min_optimal_moves
            assert easier.move_limit_percent > harder.move_limit_percent

    def test_rejects_bad_values(self):
        """Invalid budgets and shares are rejected."""
        with pytest.raises(ValueError):
            GeneratorConfig(max_attempts=0)
        with pytest.raises(ValueError):
            GeneratorConfig(star_percentages=(140, 120, 105))
        with pytest.raises(ValueError):
            GeneratorConfig(pack_distribution=(25, 25, 25, 20))

    def test_with_search_limits(self):
        """Every tier picks up the override."""
        limits = SearchLimits(max_states=7)
        config = GeneratorConfig().with_search_limits(limits)
        assert all(config.search_limits_for(d) == limits for d in Difficulty.ordered())


class TestLevelGenerator:
    """Test level generation."""

    def test_deterministic(self):
        """Same inputs give identical levels."""
        generator = LevelGenerator()
        a = generator.generate_level(Difficulty.EASY, seed=42, level_number=1, theme="Ocean")
        b = generator.generate_level(Difficulty.EASY, seed=42, level_number=1, theme="Ocean")

        assert a == b
        assert a.to_dict() == b.to_dict()

    def test_fresh_generator_is_deterministic(self):
        """Determinism does not depend on generator instance state."""
        a = LevelGenerator().generate_level(Difficulty.EASY, seed=42, theme="Ocean")
        b = LevelGenerator().generate_level(Difficulty.EASY, seed=42, theme="Ocean")
        assert a == b

    def test_default_seed_is_derived(self):
        """Omitting the seed derives it from difficulty, number and theme."""
        generator = LevelGenerator()
        implicit = generator.generate_level(Difficulty.EASY, level_number=2, theme="Forest")
        explicit = generator.generate_level(
            Difficulty.EASY,
            seed=derive_seed(Difficulty.EASY, 2, "Forest"),
            level_number=2,
            theme="Forest",
        )
        assert implicit == explicit

    def test_level_metadata(self):
        """Id, name, description, move limit and stars follow the optimal length."""
        config = GeneratorConfig()
        level = LevelGenerator(config).generate_level(
            Difficulty.EASY, seed=42, level_number=1, theme="Ocean"
        )

        assert level.id == "ocean_001"
        assert level.name == "Ocean #1"
        assert level.difficulty == Difficulty.EASY
        colors = level.initial_state.distinct_colors
        assert level.description == f"Sort {colors} colors into {level.container_count} containers"

        result = BFSSolver(config.search_limits_for(Difficulty.EASY)).solve(level.initial_state)
        optimal = result.optimal_move_count

        assert result.found
        assert optimal >= DEFAULT_TIERS[Difficulty.EASY].min_optimal_moves
        assert level.move_limit == optimal * 2
        assert level.star_thresholds == (
            -(-optimal * 105 // 100),
            -(-optimal * 120 // 100),
            -(-optimal * 140 // 100),
        )

    def test_layout_matches_tier(self):
        """Full mixed containers plus the tier's empty containers."""
        tier = DEFAULT_TIERS[Difficulty.EASY]
        level = LevelGenerator().generate_level(Difficulty.EASY, seed=7)
        state = level.initial_state

        assert not is_won(state)
        assert state.empty_count == tier.empty_containers
        assert all(c.is_full for c in state if not c.is_empty)
        assert all(count == tier.capacity for count in state.color_counts().values())
        low, high = tier.colors_range
        assert low <= state.distinct_colors <= high

    def test_generate_with_validation(self):
        """The accepted validation result comes back with the level."""
        level, validation = LevelGenerator().generate_with_validation(Difficulty.EASY, seed=3)

        assert validation.is_solvable
        assert level.move_limit == validation.optimal_move_count * 2

    def test_fails_loudly(self):
        """Running out of attempts raises with a tally of reasons."""
        config = GeneratorConfig(max_attempts=3).with_search_limits(SearchLimits(max_states=1))

        with pytest.raises(GenerationError) as exc_info:
            LevelGenerator(config).generate_level(
                Difficulty.MEDIUM, seed=1, level_number=4, theme="Desert"
            )

        error = exc_info.value
        assert error.difficulty == "medium"
        assert error.level_number == 4
        assert error.theme == "Desert"
        assert error.attempts == 3
        assert sum(error.failure_reasons.values()) == 3
        assert "after 3 attempts" in str(error)

    def test_generate_levels(self):
        """Consecutive numbering and progress reporting."""
        progress = []
        levels = LevelGenerator().generate_levels(
            Difficulty.EASY, 3, start_number=5, theme="Ocean", on_progress=lambda c, t: progress.append((c, t))
        )

        assert [level.id for level in levels] == ["ocean_005", "ocean_006", "ocean_007"]
        assert progress == [(1, 3), (2, 3), (3, 3)]

    def test_parallel_matches_sequential(self):
        """Worker pools return the same levels in the same order."""
        sequential = LevelGenerator().generate_levels(Difficulty.EASY, 3, theme="Space")
        parallel = LevelGenerator(GeneratorConfig(workers=2)).generate_levels(
            Difficulty.EASY, 3, theme="Space"
        )
        assert parallel == sequential


class TestLevelPack:
    """Test themed pack generation."""

    def test_pack_split_and_progress(self):
        """Levels follow the tier split and progress counts up per theme."""
        progress = []
        pack = LevelGenerator(easy_everywhere()).generate_level_pack(
            ["Ocean"], levels_per_theme=5, on_progress=lambda *args: progress.append(args)
        )

        levels = pack["Ocean"]
        assert [level.id for level in levels] == [f"ocean_00{i}" for i in range(1, 6)]
        assert [level.difficulty for level in levels] == [
            Difficulty.EASY,
            Difficulty.MEDIUM,
            Difficulty.MEDIUM,
            Difficulty.HARD,
            Difficulty.HARD,
        ]
        assert progress[-1] == ("Ocean", 5, 5)

    def test_theme_failure_after_retries(self):
        """A theme failing every retry surfaces a GenerationError for it."""
        config = easy_everywhere(max_attempts=1, max_theme_attempts=2).with_search_limits(
            SearchLimits(max_states=1)
        )

        with pytest.raises(GenerationError) as exc_info:
            LevelGenerator(config).generate_level_pack(["Ocean"], levels_per_theme=2)

        assert exc_info.value.theme == "Ocean"
        assert exc_info.value.attempts == 2

    def test_skip_failed_levels(self):
        """With skipping enabled, failed levels are dropped instead."""
        config = easy_everywhere(max_attempts=1, skip_failed_levels=True).with_search_limits(
            SearchLimits(max_states=1)
        )

        pack = LevelGenerator(config).generate_level_pack(["Ocean"], levels_per_theme=2)
        assert pack == {"Ocean": []}
