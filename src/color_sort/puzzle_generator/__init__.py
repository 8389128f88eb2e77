"""
Procedural level generation.

Builds seeded, BFS-validated levels per difficulty tier and themed packs.
"""

from .config import DEFAULT_TIERS, GeneratorConfig, TierParams
from .level_generator import (
    DEFAULT_THEMES,
    LevelGenerator,
    derive_seed,
    pack_distribution,
)

__all__ = [
    "LevelGenerator",
    "GeneratorConfig",
    "TierParams",
    "DEFAULT_TIERS",
    "DEFAULT_THEMES",
    "derive_seed",
    "pack_distribution",
]
