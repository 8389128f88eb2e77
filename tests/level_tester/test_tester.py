"""
Tests for the batch level tester.
"""

import pytest

from color_sort.bfs_solver.solver import SearchOutcome
from color_sort.bfs_solver.validator import ValidationResult
from color_sort.game.colors import Color
from color_sort.game.container import Container
from color_sort.game.levels import Difficulty, Level
from color_sort.game.state import PuzzleState
from color_sort.level_tester import LevelTester, LevelTestResult, QualityPolicy

R, B, G = Color.RED, Color.BLUE, Color.GREEN


def make_level(id, layout, difficulty=Difficulty.EASY, **kwargs):
    return Level(
        id=id,
        name=id.title(),
        initial_state=PuzzleState.from_colors(layout),
        difficulty=difficulty,
        **kwargs,
    )


def unsolvable_level():
    """Only the top red fits into the one-slot spare."""
    state = PuzzleState(
        (
            Container.with_colors("main", [R, B, R], capacity=3),
            Container.empty("spare", capacity=1),
        )
    )
    return Level(id="broken", name="Broken", initial_state=state, difficulty=Difficulty.EASY)


def synthetic_result(difficulty, optimal):
    return LevelTestResult(
        level_id=f"{difficulty.value}_{optimal}",
        difficulty=difficulty,
        container_count=4,
        validation=ValidationResult(
            is_solvable=True,
            outcome=SearchOutcome.SOLVED,
            optimal_move_count=optimal,
            states_explored=10,
        ),
    )


def tiered_results(moves_per_tier):
    results = []
    for difficulty, moves in zip(Difficulty.ordered(), moves_per_tier):
        results.extend(synthetic_result(difficulty, m) for m in moves)
    return results


class TestLevelTester:
    """Test per-level and batch testing."""

    def test_tutorial_passes(self):
        """The tutorial is solvable and within the quality policy."""
        result = LevelTester().test_level(Level.tutorial())

        assert result.is_solvable
        assert result.optimal_move_count == 4
        assert result.passed
        assert "PASS" in str(result)

    def test_too_easy_level_fails_quality(self):
        """One-move levels with a trivial search fail the policy."""
        level = make_level("easy", [[R, B], []], move_limit=2)
        result = LevelTester().test_level(level)

        assert result.is_solvable
        assert not result.passed_quality
        assert not result.passed
        assert any("Too easy" in issue for issue in result.quality_issues)
        assert any("Trivial search" in issue for issue in result.quality_issues)

    def test_move_limit_ratio(self):
        """Move limits far from the optimum are flagged."""
        tester = LevelTester()
        layout = [[R, B, R], [B, R, B], [], []]

        tight = tester.test_level(make_level("tight", layout, move_limit=4))
        generous = tester.test_level(make_level("generous", layout, move_limit=20))

        assert any("too tight" in issue for issue in tight.quality_issues)
        assert any("too generous" in issue for issue in generous.quality_issues)

    def test_unsolvable_level_fails(self):
        """Unsolvable levels fail without quality checks."""
        result = LevelTester().test_level(unsolvable_level())

        assert not result.is_solvable
        assert result.validation.outcome == SearchOutcome.EXHAUSTED
        assert result.quality_issues == []
        assert "FAIL" in str(result)

    def test_batch(self):
        """Counts, pass rate and input order are kept."""
        levels = [Level.tutorial(), unsolvable_level()]
        progress = []

        batch = LevelTester().test_levels(levels, on_progress=lambda c, t: progress.append(c))

        assert [r.level_id for r in batch.results] == ["tutorial_1", "broken"]
        assert batch.passed == 1
        assert batch.failed == 1
        assert batch.pass_rate == 0.5
        assert [r.level_id for r in batch.failures] == ["broken"]
        assert progress == [1, 2]

    def test_batch_with_workers(self):
        """A worker pool yields the same ordered results."""
        levels = [unsolvable_level(), Level.tutorial()]
        batch = LevelTester().test_levels(levels, workers=2)

        assert [r.level_id for r in batch.results] == ["broken", "tutorial_1"]
        assert batch.passed == 1

    def test_empty_batch(self):
        """An empty batch has a zero pass rate."""
        assert LevelTester().test_levels([]).pass_rate == 0.0

    def test_invalid_policy(self):
        """Inverted ratio bounds are rejected."""
        with pytest.raises(ValueError):
            QualityPolicy(min_move_limit_ratio=3.0, max_move_limit_ratio=1.1)


class TestDuplicates:
    """Test duplicate layout detection."""

    def test_identical_layouts_grouped(self):
        """Same layout with different ids and names is a duplicate."""
        layout = [[R, B, G], [G, B, R], [], []]
        levels = [
            make_level("a", layout),
            make_level("b", layout, difficulty=Difficulty.HARD),
            make_level("c", [[R, B, G], [G, B, B], [], []]),
        ]

        assert LevelTester().find_duplicates(levels) == [["a", "b"]]

    def test_single_unit_difference(self):
        """Layouts differing in one unit are not duplicates."""
        levels = [
            make_level("a", [[R, B], [B, R], []]),
            make_level("b", [[R, B], [B, G], []]),
        ]
        assert LevelTester().find_duplicates(levels) == []

    def test_container_order_matters(self):
        """Permuted containers are different layouts."""
        levels = [
            make_level("a", [[R, B], [B, R], []]),
            make_level("b", [[B, R], [R, B], []]),
        ]
        assert LevelTester().find_duplicates(levels) == []


class TestProgression:
    """Test difficulty progression checks."""

    def test_monotonic(self):
        """Increasing averages per tier are monotonic."""
        results = tiered_results([[2, 4], [5, 7], [9, 11], [14, 16]])
        progression = LevelTester().verify_difficulty_progression([], results)

        assert progression["is_monotonic"] is True
        assert progression["averages"] == {
            "easy": 3.0,
            "medium": 6.0,
            "hard": 10.0,
            "expert": 15.0,
        }

    def test_reversed(self):
        """Decreasing averages are not monotonic."""
        results = tiered_results([[16], [11], [7], [3]])
        progression = LevelTester().verify_difficulty_progression([], results)
        assert progression["is_monotonic"] is False

    def test_equal_averages(self):
        """Ties break strict ascent."""
        results = tiered_results([[3], [5], [5], [8]])
        assert LevelTester().verify_difficulty_progression([], results)["is_monotonic"] is False

    def test_missing_tier(self):
        """A tier without levels has no average and fails the check."""
        results = tiered_results([[2], [4], [], [8]])
        progression = LevelTester().verify_difficulty_progression([], results)

        assert progression["averages"]["hard"] is None
        assert progression["is_monotonic"] is False


class TestStatistics:
    """Test aggregate statistics."""

    def test_statistics(self):
        """Totals, optimal move stats and distributions."""
        levels = [
            Level.tutorial(),
            make_level("quick", [[R, B], []]),
            unsolvable_level(),
        ]
        stats = LevelTester().generate_statistics(levels)

        assert stats["total"] == 3
        assert stats["solvable_count"] == 2
        assert stats["quality_pass_count"] == 1
        assert stats["avg_optimal_moves"] == 2.5
        assert stats["min_optimal_moves"] == 1
        assert stats["max_optimal_moves"] == 4
        assert stats["difficulty_distribution"] == {
            "easy": 3,
            "medium": 0,
            "hard": 0,
            "expert": 0,
        }
        assert stats["container_distribution"] == {2: 2, 4: 1}
        assert stats["avg_states_explored"] > 0

    def test_empty_statistics(self):
        """An empty level set reports zeros."""
        stats = LevelTester().generate_statistics([])

        assert stats["total"] == 0
        assert stats["avg_optimal_moves"] == 0.0
        assert stats["max_optimal_moves"] == 0
