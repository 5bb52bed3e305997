"""
Procedural height field synthesis.

This module provides:
- Diamond-square fractal terrain from an injectable random source
- Deterministic Gaussian bumps for tests and demos
- A registry for selecting a generator by name
"""

from .random_source import RandomSource, NumpyRandomSource, default_random_source
from .diamond_square import generate_random, grid_side
from .gaussian import generate_gaussian
from .grammar import ParameterSpec, GeneratorRegistry, default_registry

__all__ = [
    "RandomSource",
    "NumpyRandomSource",
    "default_random_source",
    "generate_random",
    "grid_side",
    "generate_gaussian",
    "ParameterSpec",
    "GeneratorRegistry",
    "default_registry"
]
