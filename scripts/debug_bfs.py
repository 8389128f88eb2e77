#!/usr/bin/env python3
"""
Debug script for BFS solver - runs in verbose mode, printing every depth layer.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Set

# Add src directory to path to import the color_sort package
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from color_sort.bfs_solver.solver import BFSResult, BFSSolver, SearchLimits, SearchOutcome
from color_sort.game.levels import Difficulty, Level
from color_sort.game.moves import is_won, iter_successors, valid_moves
from color_sort.game.state import PuzzleState
from color_sort.puzzle_generator import LevelGenerator


class VerboseBFSSolver(BFSSolver):
    """BFS solver that expands one whole depth layer at a time and prints it."""

    def solve(self, state: PuzzleState, should_cancel=None, on_progress=None) -> BFSResult:
        start_time = time.perf_counter()
        print(f"=== BFS Solver Debug Session ===")
        print(f"Initial state:")
        print(state)
        print(f"Valid moves: {', '.join(str(m) for m in valid_moves(state)) or 'none'}")
        print()

        if is_won(state):
            print("Already solved!")
            return BFSResult(SearchOutcome.SOLVED, 0, 0, 1, 0.0)

        if not state.has_empty_container:
            print("ERROR: no empty container")
            return self._result(SearchOutcome.NO_EMPTY_CONTAINER, 0, 1, start_time)

        layer: List[PuzzleState] = [state]
        visited: Set[str] = {state.fingerprint()}
        states_explored = 0

        for depth in range(self.limits.max_depth + 1):
            print(f"--- Depth {depth}: {len(layer)} states ---")
            next_layer: List[PuzzleState] = []
            duplicates = 0

            for current in layer:
                if states_explored >= self.limits.max_states:
                    print(f"Hit state limit ({self.limits.max_states})")
                    return self._result(
                        SearchOutcome.STATE_LIMIT, states_explored, len(visited), start_time
                    )
                states_explored += 1

                if is_won(current):
                    print(f"\nSOLUTION FOUND at depth {depth}")
                    print(current)
                    return self._result(
                        SearchOutcome.SOLVED,
                        states_explored,
                        len(visited),
                        start_time,
                        optimal_move_count=depth,
                    )

                if depth >= self.limits.max_depth:
                    continue

                for _, successor in iter_successors(current):
                    key = successor.fingerprint()
                    if key in visited:
                        duplicates += 1
                        continue
                    visited.add(key)
                    next_layer.append(successor)

            print(f"  Added {len(next_layer)} new states, skipped {duplicates} duplicates")

            if not next_layer:
                outcome = (
                    SearchOutcome.DEPTH_LIMIT
                    if depth >= self.limits.max_depth
                    else SearchOutcome.EXHAUSTED
                )
                print(f"Frontier empty at depth {depth}")
                return self._result(outcome, states_explored, len(visited), start_time)

            layer = next_layer

        return self._result(SearchOutcome.DEPTH_LIMIT, states_explored, len(visited), start_time)


def main():
    """Run debug BFS solver."""
    parser = argparse.ArgumentParser(description="Debug BFS solver with verbose output")
    parser.add_argument(
        "--level", type=str, default=None, help="Level JSON file (default: tutorial)"
    )
    parser.add_argument(
        "--generate",
        choices=[d.value for d in Difficulty.ordered()],
        default=None,
        help="Generate a level of this difficulty instead",
    )
    parser.add_argument("--seed", type=int, default=42, help="Seed for --generate")
    parser.add_argument("--max-depth", type=int, default=50, help="Maximum search depth")
    parser.add_argument("--max-states", type=int, default=5000, help="Maximum states")

    args = parser.parse_args()

    if args.level:
        level = Level.load_from_file(args.level)
    elif args.generate:
        level = LevelGenerator().generate_level(Difficulty(args.generate), seed=args.seed)
    else:
        level = Level.tutorial()

    print(f"Debugging BFS solver on {level}")

    solver = VerboseBFSSolver(
        SearchLimits(max_depth=args.max_depth, max_states=args.max_states)
    )
    result = solver.solve(level.initial_state)

    print(f"\n=== Final Result ===")
    print(f"Outcome: {result.outcome.value}")
    print(f"Optimal moves: {result.optimal_move_count}")
    print(f"Time: {result.time_taken_ms:.1f}ms")
    print(f"States explored: {result.states_explored}")
    print(f"Unique states: {result.unique_states}")
    if result.error:
        print(f"Error: {result.error}")


if __name__ == "__main__":
    main()
