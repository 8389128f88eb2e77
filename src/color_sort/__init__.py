"""
Color sort puzzle engine: move rules, BFS solver, level generator and batch tester.
"""

__version__ = "0.1.0"
