#!/usr/bin/env python3
"""
Generate a themed color sort level pack.

Each theme gets a 20/30/30/20 easy-to-expert split. Levels are exported as a
directory of JSON records; an optional CSV summary lists one row per level.
"""

import argparse
import csv
import sys
import time
from pathlib import Path

from tqdm import tqdm

# Add src directory to path to import the color_sort package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from color_sort.exceptions import GenerationError
from color_sort.game.levels import LevelPack
from color_sort.logger import configure_logging
from color_sort.parallel import default_workers
from color_sort.puzzle_generator import DEFAULT_THEMES, GeneratorConfig, LevelGenerator


def write_summary(pack: LevelPack, path: str) -> None:
    """Write one CSV row per generated level."""
    fieldnames = [
        "id",
        "theme",
        "difficulty",
        "containers",
        "units",
        "move_limit",
        "star_thresholds",
        "complexity_score",
    ]
    with open(path, "w", newline="") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
        writer.writeheader()
        for theme, levels in pack.themes.items():
            for level in levels:
                writer.writerow(
                    {
                        "id": level.id,
                        "theme": theme,
                        "difficulty": level.difficulty.value,
                        "containers": level.container_count,
                        "units": level.total_units,
                        "move_limit": level.move_limit,
                        "star_thresholds": "/".join(map(str, level.star_thresholds)),
                        "complexity_score": f"{level.complexity_score:.1f}",
                    }
                )


def main():
    parser = argparse.ArgumentParser(description="Generate a themed level pack")
    parser.add_argument(
        "--themes",
        nargs="+",
        default=DEFAULT_THEMES,
        help="Theme names (default: %(default)s)",
    )
    parser.add_argument(
        "--levels-per-theme", type=int, default=50, help="Levels per theme"
    )
    parser.add_argument(
        "--output", type=str, default="levels", help="Output directory"
    )
    parser.add_argument("--name", type=str, default="Color Sort", help="Pack name")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject levels with quality warnings instead of keeping them",
    )
    parser.add_argument(
        "--skip-failed",
        action="store_true",
        help="Drop levels that exhaust their attempts instead of failing the theme",
    )
    parser.add_argument(
        "--max-attempts", type=int, default=50, help="Attempts per level"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help=f"Worker processes (0 = auto, {default_workers()} here)",
    )
    parser.add_argument(
        "--summary-csv", type=str, default=None, help="Optional per-level CSV summary"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "INFO")

    workers = args.workers if args.workers > 0 else default_workers()
    config = GeneratorConfig(
        max_attempts=args.max_attempts,
        strict_quality=args.strict,
        skip_failed_levels=args.skip_failed,
        workers=workers,
    )
    generator = LevelGenerator(config)

    print(f"Generating {args.levels_per_theme} levels for {len(args.themes)} theme(s)")
    print(f"Output: {args.output}")
    print(f"Strict quality: {args.strict}, workers: {workers}")
    print()

    start_time = time.time()
    pack = LevelPack(name=args.name)
    failed_themes = []

    for theme in args.themes:
        with tqdm(
            total=args.levels_per_theme,
            desc=theme,
            unit="level",
            ncols=100,
        ) as pbar:

            def on_progress(_theme, current, total):
                pbar.n = current
                pbar.refresh()

            try:
                levels = generator.generate_level_pack(
                    [theme], args.levels_per_theme, on_progress=on_progress
                )
            except GenerationError as e:
                failed_themes.append(theme)
                tqdm.write(f"Failed to generate {theme}: {e}")
                continue

        pack.add_theme(theme, levels[theme])

    elapsed = time.time() - start_time

    if len(pack) > 0:
        pack.save_to_directory(args.output)
        if args.summary_csv:
            write_summary(pack, args.summary_csv)

    stats = pack.statistics()
    print(f"\n=== Generation Complete ===")
    print(f"Generated: {stats['total_levels']:,} levels")
    print(f"By theme: {stats['levels_by_theme']}")
    print(f"By difficulty: {stats['levels_by_difficulty']}")
    print(f"Time elapsed: {elapsed:.1f}s")

    if failed_themes:
        print(f"Failed themes: {', '.join(failed_themes)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
