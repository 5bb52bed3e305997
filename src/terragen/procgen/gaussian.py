"""
Deterministic Gaussian bump height fields.
"""

import logging
import math
import numbers
from typing import Sequence, Tuple

import numpy as np

from ..engine.heightfield import HeightField
from ..errors import InvalidArgument

log = logging.getLogger(__name__)


def generate_gaussian(
    width: int,
    height: int,
    sigma: Sequence[float],
    amplitude: float,
    center: Sequence[float],
    falloff_radius: float
) -> HeightField:
    """
    Generate a single anisotropic Gaussian bump.

    elevation(x, y) = amplitude * exp(-((x - cx)^2 / (2 sx^2) + (y - cy)^2 / (2 sy^2)))

    Points farther than falloff_radius from center are exactly zero (hard
    cutoff). Points at exactly falloff_radius keep their Gaussian value.

    Args:
        width: Grid points along x, at least 2.
        height: Grid points along y, at least 2.
        sigma: (sx, sy) standard deviations in grid units, both > 0.
        amplitude: Peak elevation at center.
        center: (cx, cy) in grid coordinates; need not lie on a grid point.
        falloff_radius: Cutoff distance in grid units, >= 0.

    Returns:
        HeightField of the requested size.
    """

    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, numbers.Integral):
            raise InvalidArgument(f"{name} must be an integer, got {value!r}")
        if value < 2:
            raise InvalidArgument(f"{name} must be >= 2, got {value}")

    sigma_x, sigma_y = _as_pair(sigma, "sigma")
    center_x, center_y = _as_pair(center, "center")
    amplitude = _as_scalar(amplitude, "amplitude")
    falloff_radius = _as_scalar(falloff_radius, "falloff_radius")

    if sigma_x <= 0 or sigma_y <= 0:
        raise InvalidArgument(f"sigma components must be > 0, got {(sigma_x, sigma_y)}")
    if falloff_radius < 0:
        raise InvalidArgument(f"falloff_radius must be >= 0, got {falloff_radius}")

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    dx = xs - center_x
    dy = ys - center_y

    exponent = dx ** 2 / (2.0 * sigma_x ** 2) + dy ** 2 / (2.0 * sigma_y ** 2)
    elevations = amplitude * np.exp(-exponent)

    # Hard cutoff beyond the falloff radius
    outside = np.hypot(dx, dy) > falloff_radius
    elevations[outside] = 0.0

    log.debug(
        "Gaussian bump: %dx%d center=(%.3g, %.3g) %d points cut off",
        width, height, center_x, center_y, int(outside.sum())
    )

    return HeightField(elevations)


def _as_scalar(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgument(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidArgument(f"{name} must be finite, got {value}")
    return float(value)


def _as_pair(values: Sequence[float], name: str) -> Tuple[float, float]:
    try:
        pair = tuple(values)
    except TypeError:
        raise InvalidArgument(f"{name} must be a pair of numbers, got {values!r}")

    if len(pair) != 2:
        raise InvalidArgument(f"{name} must have 2 components, got {len(pair)}")

    return _as_scalar(pair[0], name), _as_scalar(pair[1], name)
