"""
Diamond-square fractal height field synthesis.

Each pass halves the step size. The square step fills every cell center
from its four corners, the diamond step fills every edge midpoint from its
orthogonal neighbours, and the displacement range shrinks by
2 ** -roughness so high-frequency detail fades out.
"""

import logging
import math
import numbers
from typing import Optional

import numpy as np

from ..engine.heightfield import HeightField
from ..errors import InvalidArgument
from .random_source import RandomSource, default_random_source

log = logging.getLogger(__name__)


def grid_side(iterations: int) -> int:
    """Side length in points of a grid refined `iterations` times."""
    return 2 ** iterations + 1


def generate_random(
    roughness: float,
    max_seed_height: float,
    iterations: int,
    random_source: Optional[RandomSource] = None
) -> HeightField:
    """
    Generate a square height field by diamond-square subdivision.

    Args:
        roughness: Exponent controlling how fast the displacement range
            decays per pass. Higher values give smoother terrain.
        max_seed_height: Corners are seeded in [0, max_seed_height); this is
            also the displacement range of the first pass.
        iterations: Number of subdivision passes. The grid side is
            2 ** iterations + 1.
        random_source: Source of uniform floats. Defaults to a time-seeded
            source, which is not reproducible.

    Returns:
        HeightField of shape (2 ** iterations + 1) squared.

    Raises:
        InvalidArgument: On negative or non-integer iterations, non-finite
            roughness, a negative/non-finite seed height, or a negative
            roughness that grows the range past float limits.
    """

    if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral):
        raise InvalidArgument(f"iterations must be an integer, got {iterations!r}")
    if iterations < 0:
        raise InvalidArgument(f"iterations must be >= 0, got {iterations}")
    if not _is_finite_number(roughness):
        raise InvalidArgument(f"roughness must be a finite number, got {roughness!r}")
    if not _is_finite_number(max_seed_height) or max_seed_height < 0:
        raise InvalidArgument(
            f"max_seed_height must be a finite number >= 0, got {max_seed_height!r}"
        )

    iterations = int(iterations)
    spread = float(max_seed_height)
    decay = _range_decay(roughness, spread, iterations)

    if random_source is None:
        random_source = default_random_source()

    side = grid_side(iterations)
    grid = np.zeros((side, side), dtype=np.float64)

    # Seed the four corners: top-left, top-right, bottom-left, bottom-right
    corners = np.asarray(random_source.uniform(0.0, max_seed_height, 4), dtype=np.float64)
    grid[0, 0], grid[0, -1], grid[-1, 0], grid[-1, -1] = corners

    step = side - 1
    passes = 0

    while step > 1:
        _square_step(grid, step, spread, random_source)
        _diamond_step(grid, step, spread, random_source)
        passes += 1
        if passes < iterations:
            spread *= decay
        step //= 2

    log.debug(
        "Diamond-square: side=%d passes=%d last_range=%.6g",
        side, iterations, spread
    )

    return HeightField(grid)


def _is_finite_number(value) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _range_decay(roughness: float, max_seed_height: float, iterations: int) -> float:
    """
    Per-pass range multiplier, 2 ** -roughness.

    Raises:
        InvalidArgument: If any pass would draw from a range wider than a
            float can hold.
    """

    if iterations == 0:
        return 1.0

    try:
        decay = 2.0 ** (-roughness)
        # Widest pass is the first when decay <= 1, otherwise the last
        widest = 2.0 * max_seed_height * max(1.0, decay) ** (iterations - 1)
    except OverflowError:
        widest = math.inf

    if not math.isfinite(widest):
        raise InvalidArgument(
            f"roughness {roughness} grows the displacement range past float limits "
            f"over {iterations} passes"
        )

    return decay


def _square_step(grid: np.ndarray, step: int, spread: float, random_source: RandomSource):
    """Set every cell center from the mean of its four corners."""

    half = step // 2
    last = grid.shape[0] - 1

    top_left = grid[0:last:step, 0:last:step]
    top_right = grid[0:last:step, step::step]
    bottom_left = grid[step::step, 0:last:step]
    bottom_right = grid[step::step, step::step]

    average = (top_left + top_right + bottom_left + bottom_right) / 4.0
    offsets = random_source.uniform(-spread, spread, average.shape)
    grid[half::step, half::step] = average + offsets


def _diamond_step(grid: np.ndarray, step: int, spread: float, random_source: RandomSource):
    """
    Set every edge midpoint from the mean of its existing neighbours.

    Neighbours sit `step // 2` away along each axis. Interior midpoints have
    four of them, border midpoints three; nothing wraps around.
    """

    half = step // 2
    total = np.zeros_like(grid)
    count = np.zeros_like(grid)

    # Neighbour to the left / right
    total[:, half:] += grid[:, :-half]
    count[:, half:] += 1
    total[:, :-half] += grid[:, half:]
    count[:, :-half] += 1

    # Neighbour above / below
    total[half:, :] += grid[:-half, :]
    count[half:, :] += 1
    total[:-half, :] += grid[half:, :]
    count[:-half, :] += 1

    average = total / count

    # Midpoints of horizontal edges, then of vertical edges
    horizontal = average[0::step, half::step]
    grid[0::step, half::step] = horizontal + random_source.uniform(-spread, spread, horizontal.shape)

    vertical = average[half::step, 0::step]
    grid[half::step, 0::step] = vertical + random_source.uniform(-spread, spread, vertical.shape)
