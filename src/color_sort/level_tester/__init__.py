"""
Batch tester for generated level sets.
"""

from .tester import BatchTestResult, LevelTester, LevelTestResult, QualityPolicy

__all__ = [
    "LevelTester",
    "LevelTestResult",
    "BatchTestResult",
    "QualityPolicy",
]
