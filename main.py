#!/usr/bin/env python3
"""
Color Sort Puzzle Engine

Move rules, an optimal BFS solver, a seeded level generator and a batch
tester for color sort puzzles.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from color_sort.bfs_solver import BFSSolver, DifficultyScorer, validate_state
from color_sort.exceptions import GenerationError
from color_sort.game.levels import Difficulty, Level
from color_sort.puzzle_generator import GeneratorConfig, LevelGenerator


def print_level(level: Level, limits=None):
    """Print a level and its solver verdict."""
    print(level)
    if level.description:
        print(level.description)
    print(level.initial_state)
    print(f"Move limit: {level.move_limit}")
    print(f"Star thresholds: {level.star_thresholds}")

    validation = validate_state(level.initial_state, solver=BFSSolver(limits))
    print(validation)

    score, label = DifficultyScorer.score_and_label(level.initial_state)
    print(f"Estimated difficulty: {score:.1f} ({label.display_name})")


def run_tutorial():
    """Solve the built-in tutorial level."""
    print("Tutorial level:")
    print_level(Level.tutorial())


def run_generate(difficulty: Difficulty, seed, theme, strict: bool) -> int:
    """Generate and print one level."""
    generator = LevelGenerator(GeneratorConfig(strict_quality=strict))
    try:
        level = generator.generate_level(difficulty, seed=seed, theme=theme)
    except GenerationError as e:
        print(f"Generation failed: {e}")
        return 1

    print(f"Generated {difficulty.display_name} level (seed {seed}):")
    print_level(level, generator.config.search_limits_for(difficulty))
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Color Sort Puzzle Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  # Solve the tutorial level
  python main.py --generate --seed 42             # Generate an easy level
  python main.py --generate --difficulty hard --theme Ocean
        """,
    )

    parser.add_argument(
        "--generate", action="store_true", help="Generate a level instead"
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty.ordered()],
        default="easy",
        help="Difficulty tier for --generate",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for level generation"
    )
    parser.add_argument("--theme", type=str, default=None, help="Theme name")
    parser.add_argument(
        "--strict", action="store_true", help="Reject levels with quality warnings"
    )

    args = parser.parse_args()

    if args.generate:
        sys.exit(
            run_generate(Difficulty(args.difficulty), args.seed, args.theme, args.strict)
        )
    else:
        run_tutorial()


if __name__ == "__main__":
    main()
