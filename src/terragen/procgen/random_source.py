"""
Injectable random sources for terrain synthesis.

Generators never touch global random state. Callers pass a source; tests
pass a fixed-seed one, the demo passes a time-seeded one.
"""

import logging
import time
from typing import Optional, Protocol, Tuple, Union

import numpy as np

log = logging.getLogger(__name__)

Size = Optional[Union[int, Tuple[int, ...]]]


class RandomSource(Protocol):
    """Anything that can draw uniform floats in [low, high)."""

    def uniform(self, low: float, high: float, size: Size = None) -> Union[float, np.ndarray]:
        ...


class NumpyRandomSource:
    """
    Uniform random source backed by numpy's Generator.

    Args:
        seed: Integer seed. None derives one from the clock, which makes
            the stream non-reproducible unless the chosen seed is recorded.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = time.time_ns() & 0xFFFFFFFF
            log.debug("Using time-based seed %d", seed)
        self.seed = int(seed)
        self._rng = np.random.default_rng(self.seed)

    def uniform(self, low: float, high: float, size: Size = None) -> Union[float, np.ndarray]:
        return self._rng.uniform(low, high, size)

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed})"


def default_random_source() -> NumpyRandomSource:
    """Time-seeded source used when the caller does not inject one."""
    return NumpyRandomSource()
