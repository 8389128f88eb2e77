"""
Procedural level generation for the color sort puzzle.

Candidates are built from a solved layout whose color runs are cut into
chunks, shuffled and repacked. Each candidate is filtered cheaply, then
solved with BFS; only solvable candidates within the tier budget become
Levels. Everything is driven by seeded ``random.Random`` instances, so the
same (difficulty, level number, theme) always yields the same Level.
"""

import random
import zlib
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..bfs_solver.difficulty import DifficultyScorer
from ..bfs_solver.solver import BFSSolver
from ..bfs_solver.validator import ValidationResult, quick_check, validate_state
from ..exceptions import GenerationError
from ..game.colors import Color
from ..game.container import Container
from ..game.levels import Difficulty, Level
from ..game.moves import has_any_valid_move, is_won
from ..game.state import PuzzleState
from ..logger import logger
from ..parallel import map_ordered
from .config import GeneratorConfig, TierParams

DEFAULT_THEMES = ["Ocean", "Forest", "Desert", "Space"]


def derive_seed(
    difficulty: Difficulty,
    level_number: int,
    theme: Optional[str] = None,
    salt: int = 0,
) -> int:
    """Reproducible seed for a (difficulty, level number, theme) triple.

    Uses crc32 of the theme rather than ``hash`` so the value is stable
    across interpreter runs.
    """
    theme_hash = zlib.crc32(theme.strip().lower().encode("utf-8")) if theme else 0
    seed = theme_hash * 1_000_000 + difficulty.rank * 10_000 + level_number
    return seed + salt * 10**16


def pack_distribution(total_levels: int, shares: Sequence[int]) -> Dict[Difficulty, int]:
    """Split ``total_levels`` across tiers by percentage, rounding half up.

    The last tier absorbs any rounding difference so the counts add up.
    """
    difficulties = Difficulty.ordered()
    counts = {d: (total_levels * share * 2 + 100) // 200 for d, share in zip(difficulties, shares)}
    counts[difficulties[-1]] = max(0, total_levels - sum(counts[d] for d in difficulties[:-1]))
    return counts


def _ceil_percent(value: int, percent: int) -> int:
    return -(-value * percent // 100)


@dataclass(frozen=True)
class LevelJob:
    """One level to generate; picklable so it can cross process boundaries."""

    config: GeneratorConfig
    difficulty: Difficulty
    level_number: int
    theme: Optional[str]
    seed: int
    capture_errors: bool = False


def run_level_job(job: LevelJob) -> Union[Level, GenerationError]:
    generator = LevelGenerator(job.config)
    try:
        return generator.generate_level(
            job.difficulty, seed=job.seed, level_number=job.level_number, theme=job.theme
        )
    except GenerationError as e:
        if job.capture_errors:
            return e
        raise


class LevelGenerator:
    """Generates solvable levels for each difficulty tier."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize the generator.

        Args:
            config: Tier tables and retry budgets, defaults to GeneratorConfig()
        """
        self.config = config or GeneratorConfig()
        self.logger = logger.bind(component="level_generator")

    def generate_level(
        self,
        difficulty: Difficulty,
        seed: Optional[int] = None,
        level_number: int = 1,
        theme: Optional[str] = None,
    ) -> Level:
        """Generate a validated, solvable level.

        Args:
            difficulty: Tier to generate for
            seed: Base seed; derived from (difficulty, level_number, theme) when None
            level_number: Number used for the level id and name
            theme: Optional theme name, e.g. "Ocean"

        Returns:
            Level with move limit and star thresholds set

        Raises:
            GenerationError: If no candidate passes within ``max_attempts``
        """
        level, _ = self.generate_with_validation(difficulty, seed, level_number, theme)
        return level

    def generate_with_validation(
        self,
        difficulty: Difficulty,
        seed: Optional[int] = None,
        level_number: int = 1,
        theme: Optional[str] = None,
    ) -> Tuple[Level, ValidationResult]:
        """Same as generate_level, also returning the accepted validation result."""
        if seed is None:
            seed = derive_seed(difficulty, level_number, theme)

        tier = self.config.tier(difficulty)
        solver = BFSSolver(tier.search_limits)
        failures: Counter = Counter()
        log = self.logger.bind(id=self._level_id(level_number, theme))

        for attempt in range(self.config.max_attempts):
            # Each attempt gets its own perturbed stream so retries stay reproducible
            rng = random.Random(f"{seed}/{attempt}")
            state, color_count = self._build_candidate(tier, rng)

            if is_won(state):
                failures["already_solved"] += 1
                continue

            if not has_any_valid_move(state) or not quick_check(state):
                failures["dead_state"] += 1
                continue

            validation = validate_state(state, solver=solver)

            if not validation.is_solvable:
                failures[validation.outcome.value] += 1
                log.debug(f"Attempt {attempt + 1}: {validation.error}")
                continue

            if validation.optimal_move_count < tier.min_optimal_moves:
                failures["too_short"] += 1
                continue

            level = self._build_level(
                state, difficulty, tier, level_number, theme, color_count, validation
            )

            mismatch = DifficultyScorer.cross_check(level)
            if mismatch is not None:
                validation.findings.append(mismatch)

            if validation.findings and self.config.strict_quality:
                failures["quality"] += 1
                log.debug(f"Attempt {attempt + 1} rejected: {validation.warning}")
                continue

            if validation.findings:
                log.warning(f"Accepted with warnings: {validation.warning}")

            log.debug(
                f"Generated in {attempt + 1} attempt(s): "
                f"{validation.optimal_move_count} optimal moves, "
                f"{validation.states_explored} states"
            )
            return level, validation

        reasons = ", ".join(f"{k}={v}" for k, v in sorted(failures.items()))
        message = (
            f"Failed to generate valid level after {self.config.max_attempts} attempts. "
            f"Difficulty: {difficulty.value}, Level: {level_number}, "
            f"Theme: {theme} ({reasons})"
        )
        log.error(message)
        raise GenerationError(
            message,
            difficulty=difficulty.value,
            level_number=level_number,
            theme=theme,
            attempts=self.config.max_attempts,
            failure_reasons=dict(failures),
        )

    def generate_levels(
        self,
        difficulty: Difficulty,
        count: int,
        start_number: int = 1,
        theme: Optional[str] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
        salt: int = 0,
    ) -> List[Level]:
        """Generate ``count`` consecutive levels of one tier.

        Args:
            difficulty: Tier to generate for
            count: Number of levels
            start_number: Level number of the first level
            theme: Optional theme name
            on_progress: Called with (current, total)
            salt: Perturbs every derived seed; 0 keeps the canonical seeds

        Returns:
            Levels in level-number order
        """
        jobs = [
            self._job(difficulty, start_number + i, theme, salt) for i in range(count)
        ]
        return self._run_jobs(jobs, on_progress)

    def generate_level_pack(
        self,
        themes: Optional[Sequence[str]] = None,
        levels_per_theme: int = 50,
        on_progress: Optional[Callable[[str, int, int], None]] = None,
    ) -> Dict[str, List[Level]]:
        """Generate a themed pack with a 20/30/30/20 easy-to-expert split.

        A theme whose generation fails is retried as a whole, with perturbed
        seeds, up to ``max_theme_attempts`` times.

        Args:
            themes: Theme names, defaults to Ocean, Forest, Desert and Space
            levels_per_theme: Levels per theme
            on_progress: Called with (theme, current, total)

        Returns:
            Mapping of theme to its levels in play order

        Raises:
            GenerationError: If a theme fails on every attempt
        """
        themes = list(themes) if themes is not None else list(DEFAULT_THEMES)
        pack: Dict[str, List[Level]] = {}

        for theme in themes:
            last_error: Optional[GenerationError] = None

            for theme_attempt in range(self.config.max_theme_attempts):
                if theme_attempt > 0:
                    self.logger.warning(
                        f"Retrying theme {theme} (attempt {theme_attempt + 1}/"
                        f"{self.config.max_theme_attempts})"
                    )
                try:
                    pack[theme] = self._generate_theme(
                        theme, levels_per_theme, theme_attempt, on_progress
                    )
                    last_error = None
                    break
                except GenerationError as e:
                    last_error = e

            if last_error is not None:
                message = (
                    f"Failed to generate levels for {theme} after "
                    f"{self.config.max_theme_attempts} attempts: {last_error}"
                )
                self.logger.error(message)
                raise GenerationError(
                    message,
                    theme=theme,
                    attempts=self.config.max_theme_attempts,
                    failure_reasons=last_error.failure_reasons,
                )

            self.logger.info(f"Generated {len(pack[theme])} levels for {theme}")

        return pack

    def _generate_theme(
        self,
        theme: str,
        levels_per_theme: int,
        salt: int,
        on_progress: Optional[Callable[[str, int, int], None]],
    ) -> List[Level]:
        distribution = pack_distribution(levels_per_theme, self.config.pack_distribution)

        jobs = []
        level_number = 1
        for difficulty in Difficulty.ordered():
            for _ in range(distribution[difficulty]):
                jobs.append(self._job(difficulty, level_number, theme, salt))
                level_number += 1

        def progress(current: int, total: int) -> None:
            if on_progress is not None:
                on_progress(theme, current, total)

        return self._run_jobs(jobs, progress)

    def _job(
        self, difficulty: Difficulty, level_number: int, theme: Optional[str], salt: int
    ) -> LevelJob:
        return LevelJob(
            config=self.config,
            difficulty=difficulty,
            level_number=level_number,
            theme=theme,
            seed=derive_seed(difficulty, level_number, theme, salt),
            capture_errors=self.config.skip_failed_levels,
        )

    def _run_jobs(
        self,
        jobs: List[LevelJob],
        on_progress: Optional[Callable[[int, int], None]],
    ) -> List[Level]:
        results = map_ordered(run_level_job, jobs, self.config.workers, on_progress)

        levels = []
        for job, result in zip(jobs, results):
            if isinstance(result, GenerationError):
                self.logger.warning(
                    f"Skipping level {job.level_number} ({job.difficulty.value}): {result}"
                )
                continue
            levels.append(result)
        return levels

    def _build_candidate(
        self, tier: TierParams, rng: random.Random
    ) -> Tuple[PuzzleState, int]:
        color_count = rng.randint(*tier.colors_range)
        colors = rng.sample(list(Color), color_count)
        solved = self._generate_solved_state(colors, tier)
        return self._distribute_puzzle(solved, tier, rng), color_count

    def _generate_solved_state(self, colors: List[Color], tier: TierParams) -> PuzzleState:
        """One full single-color container per color plus the empty workspace."""
        containers = [
            Container(id=f"c{i}", capacity=tier.capacity, units=(color,) * tier.capacity)
            for i, color in enumerate(colors)
        ]
        for i in range(tier.empty_containers):
            containers.append(Container.empty(f"c{len(colors) + i}", tier.capacity))
        return PuzzleState(tuple(containers))

    def _distribute_puzzle(
        self, solved: PuzzleState, tier: TierParams, rng: random.Random
    ) -> PuzzleState:
        """Mix a solved layout by cutting color runs into chunks and repacking them.

        Unit counts per color are unchanged, and every formerly full
        container is full again afterwards.
        """
        chunks: List[List[Color]] = []
        for container in solved:
            units = list(container.units)
            while units:
                size = min(rng.randint(*tier.chunk_size_range), len(units))
                chunks.append(units[:size])
                units = units[size:]

        rng.shuffle(chunks)

        units = [unit for chunk in chunks for unit in chunk]
        full_count = sum(1 for c in solved if not c.is_empty)

        containers = []
        for i in range(full_count):
            start = i * tier.capacity
            containers.append(
                Container(
                    id=f"c{i}",
                    capacity=tier.capacity,
                    units=tuple(units[start : start + tier.capacity]),
                )
            )
        for i in range(len(solved) - full_count):
            containers.append(Container.empty(f"c{full_count + i}", tier.capacity))

        return PuzzleState(tuple(containers))

    def _build_level(
        self,
        state: PuzzleState,
        difficulty: Difficulty,
        tier: TierParams,
        level_number: int,
        theme: Optional[str],
        color_count: int,
        validation: ValidationResult,
    ) -> Level:
        optimal = validation.optimal_move_count
        return Level(
            id=self._level_id(level_number, theme),
            name=self._level_name(level_number, theme),
            initial_state=state,
            difficulty=difficulty,
            move_limit=_ceil_percent(optimal, tier.move_limit_percent),
            description=f"Sort {color_count} colors into {len(state)} containers",
            star_thresholds=tuple(
                _ceil_percent(optimal, percent) for percent in self.config.star_percentages
            ),
        )

    @staticmethod
    def _level_id(number: int, theme: Optional[str]) -> str:
        prefix = theme.lower().replace(" ", "_") if theme else "level"
        return f"{prefix}_{number:03d}"

    @staticmethod
    def _level_name(number: int, theme: Optional[str]) -> str:
        prefix = f"{theme} " if theme else ""
        return f"{prefix}#{number}"
