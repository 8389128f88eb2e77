"""
Batch quality assurance over a generated level corpus.

Every level is re-solved independently of how it was generated. Workers
return one LevelTestResult each and the coordinator merges them, so no
counters are shared between workers.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from ..bfs_solver.difficulty import DifficultyScorer
from ..bfs_solver.solver import BFSSolver, SearchLimits
from ..bfs_solver.validator import ValidationResult, validate_state
from ..game.levels import Difficulty, Level
from ..logger import logger
from ..parallel import map_ordered


@dataclass(frozen=True)
class QualityPolicy:
    """Per-level checks applied on top of solvability."""

    min_optimal_moves: int = 2
    min_move_limit_ratio: float = 1.1
    max_move_limit_ratio: float = 3.0
    min_states_explored: int = 3

    def __post_init__(self):
        if self.min_optimal_moves < 0:
            raise ValueError("min_optimal_moves must be non-negative")
        if not 0 < self.min_move_limit_ratio <= self.max_move_limit_ratio:
            raise ValueError("move limit ratios must satisfy 0 < min <= max")
        if self.min_states_explored < 0:
            raise ValueError("min_states_explored must be non-negative")


@dataclass
class LevelTestResult:
    """Outcome of testing a single level."""

    level_id: str
    difficulty: Difficulty
    container_count: int
    validation: ValidationResult
    quality_issues: List[str] = field(default_factory=list)

    @property
    def is_solvable(self) -> bool:
        return self.validation.is_solvable

    @property
    def optimal_move_count(self) -> Optional[int]:
        return self.validation.optimal_move_count

    @property
    def states_explored(self) -> int:
        return self.validation.states_explored

    @property
    def passed_quality(self) -> bool:
        return not self.quality_issues

    @property
    def passed(self) -> bool:
        return self.is_solvable and self.passed_quality

    @property
    def has_warnings(self) -> bool:
        return self.validation.has_warnings

    def __str__(self) -> str:
        if not self.is_solvable:
            return f"{self.level_id}: FAIL ({self.validation.error})"
        if self.quality_issues:
            return f"{self.level_id}: FAIL ({'; '.join(self.quality_issues)})"
        return f"{self.level_id}: PASS ({self.optimal_move_count} moves)"


@dataclass
class BatchTestResult:
    """Aggregate of a batch run; ``results`` keeps input order."""

    results: List[LevelTestResult] = field(default_factory=list)
    passed: int = 0
    failed: int = 0
    warnings: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def pass_rate(self) -> float:
        if not self.results:
            return 0.0
        return self.passed / len(self.results)

    @property
    def failures(self) -> List[LevelTestResult]:
        return [r for r in self.results if not r.passed]

    def add(self, result: LevelTestResult) -> None:
        self.results.append(result)
        if result.passed:
            self.passed += 1
        else:
            self.failed += 1
        if result.has_warnings:
            self.warnings += 1


@dataclass(frozen=True)
class _TestJob:
    level: Level
    limits: SearchLimits
    policy: QualityPolicy


def _run_test_job(job: _TestJob) -> LevelTestResult:
    return LevelTester(job.limits, job.policy).test_level(job.level)


class LevelTester:
    """Re-validates levels and reports corpus-wide quality metrics."""

    def __init__(
        self,
        limits: Optional[SearchLimits] = None,
        policy: Optional[QualityPolicy] = None,
    ):
        """Initialize the tester.

        Args:
            limits: Search bounds for re-solving; defaults to a generous 100k states
                so levels from every tier can be confirmed
            policy: Per-level quality checks
        """
        self.limits = limits or SearchLimits(max_depth=60, max_states=100_000)
        self.policy = policy or QualityPolicy()
        self.solver = BFSSolver(self.limits)
        self.logger = logger.bind(component="level_tester")

    def test_level(self, level: Level) -> LevelTestResult:
        """Solve one level and apply the quality policy to it."""
        validation = validate_state(level.initial_state, solver=self.solver)

        mismatch = DifficultyScorer.cross_check(level)
        if mismatch is not None:
            validation.findings.append(mismatch)

        result = LevelTestResult(
            level_id=level.id,
            difficulty=level.difficulty,
            container_count=level.container_count,
            validation=validation,
        )
        if validation.is_solvable:
            result.quality_issues = self._quality_issues(level, validation)

        self.logger.bind(id=level.id).debug(str(result))
        return result

    def _quality_issues(self, level: Level, validation: ValidationResult) -> List[str]:
        policy = self.policy
        optimal = validation.optimal_move_count
        issues = []

        if optimal < policy.min_optimal_moves:
            issues.append(f"Too easy: only {optimal} moves required")

        if level.move_limit is not None and optimal > 0:
            ratio = level.move_limit / optimal
            if ratio < policy.min_move_limit_ratio:
                issues.append(f"Move limit too tight: {ratio:.2f}x optimal")
            elif ratio > policy.max_move_limit_ratio:
                issues.append(f"Move limit too generous: {ratio:.2f}x optimal")

        if validation.states_explored < policy.min_states_explored:
            issues.append(
                f"Trivial search: only {validation.states_explored} states explored"
            )

        return issues

    def test_levels(
        self,
        levels: Sequence[Level],
        on_progress: Optional[Callable[[int, int], None]] = None,
        workers: int = 1,
    ) -> BatchTestResult:
        """Test every level, optionally across a worker pool.

        Args:
            levels: Levels to test
            on_progress: Called with (current, total) after each level
            workers: Pool size; 1 tests sequentially

        Returns:
            BatchTestResult with per-level results in input order
        """
        jobs = [_TestJob(level, self.limits, self.policy) for level in levels]
        results = map_ordered(_run_test_job, jobs, workers, on_progress)

        batch = BatchTestResult()
        for result in results:
            batch.add(result)

        self.logger.info(
            f"Tested {batch.total} levels: {batch.passed} passed, "
            f"{batch.failed} failed, {batch.warnings} with warnings"
        )
        return batch

    def find_duplicates(self, levels: Sequence[Level]) -> List[List[str]]:
        """Group ids of levels whose initial layouts are identical.

        Container order is significant: the same fingerprint the solver uses
        for its visited set is used here.
        """
        groups: Dict[str, List[str]] = defaultdict(list)
        for level in levels:
            groups[level.initial_state.fingerprint()].append(level.id)

        duplicates = [ids for ids in groups.values() if len(ids) > 1]
        if duplicates:
            self.logger.warning(f"Found {len(duplicates)} duplicate group(s)")
        return duplicates

    def verify_difficulty_progression(
        self,
        levels: Sequence[Level],
        results: Optional[Sequence[LevelTestResult]] = None,
    ) -> Dict[str, Any]:
        """Check that mean optimal move count strictly rises from easy to expert.

        A tier with no solvable levels has no average and makes the
        progression non-monotonic.

        Args:
            levels: Levels to check
            results: Previous test results for ``levels`` to avoid re-solving

        Returns:
            Dict with ``averages`` (tier name to mean or None) and ``is_monotonic``
        """
        if results is None:
            results = [self.test_level(level) for level in levels]

        moves_by_tier: Dict[Difficulty, List[int]] = {d: [] for d in Difficulty.ordered()}
        for result in results:
            if result.is_solvable:
                moves_by_tier[result.difficulty].append(result.optimal_move_count)

        averages = {
            d.value: float(np.mean(moves)) if moves else None
            for d, moves in moves_by_tier.items()
        }

        ordered = [averages[d.value] for d in Difficulty.ordered()]
        is_monotonic = all(a is not None for a in ordered) and all(
            a < b for a, b in zip(ordered, ordered[1:])
        )

        if not is_monotonic:
            self.logger.warning(f"Difficulty progression is not monotonic: {averages}")

        return {"averages": averages, "is_monotonic": is_monotonic}

    def generate_statistics(
        self,
        levels: Sequence[Level],
        results: Optional[Sequence[LevelTestResult]] = None,
    ) -> Dict[str, Any]:
        """Aggregate statistics over a level set.

        Args:
            levels: Levels to summarize
            results: Previous test results for ``levels`` to avoid re-solving

        Returns:
            Dict of totals, optimal move stats and distributions
        """
        if results is None:
            results = [self.test_level(level) for level in levels]

        solvable = [r for r in results if r.is_solvable]
        moves = [r.optimal_move_count for r in solvable]

        difficulty_distribution = {d.value: 0 for d in Difficulty.ordered()}
        difficulty_distribution.update(Counter(level.difficulty.value for level in levels))

        container_distribution = dict(
            sorted(Counter(level.container_count for level in levels).items())
        )

        return {
            "total": len(levels),
            "solvable_count": len(solvable),
            "quality_pass_count": sum(1 for r in results if r.passed),
            "avg_optimal_moves": float(np.mean(moves)) if moves else 0.0,
            "min_optimal_moves": int(np.min(moves)) if moves else 0,
            "max_optimal_moves": int(np.max(moves)) if moves else 0,
            "avg_states_explored": float(np.mean([r.states_explored for r in solvable]))
            if solvable
            else 0.0,
            "difficulty_distribution": difficulty_distribution,
            "container_distribution": container_distribution,
        }
