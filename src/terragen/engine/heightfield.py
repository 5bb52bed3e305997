"""
Dense height field container.

A HeightField is a complete rectangular grid of elevation samples stored
row-major as a (height, width) float64 array, indexed as elevations[y, x].
"""

import numpy as np
from typing import Sequence, Tuple

from ..errors import InvalidArgument


class HeightField:
    """
    Immutable grid of scalar elevations.

    Width and height count grid points, not cells. The backing array is
    copied on construction and frozen, so a field handed to TerrainData
    can never change underneath it.
    """

    __slots__ = ("_elevations",)

    def __init__(self, elevations: np.ndarray):
        data = np.array(elevations, dtype=np.float64, copy=True)

        if data.ndim != 2:
            raise InvalidArgument(f"Height field must be 2D, got shape {data.shape}")

        rows, cols = data.shape
        if cols < 2 or rows < 2:
            raise InvalidArgument(
                f"Height field needs at least 2x2 points, got {cols}x{rows}"
            )

        if not np.all(np.isfinite(data)):
            raise InvalidArgument("Height field contains non-finite elevations")

        data.setflags(write=False)
        self._elevations = data

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "HeightField":
        """Build a field from nested rows, rows[y][x]."""
        return cls(np.asarray(rows, dtype=np.float64))

    @property
    def elevations(self) -> np.ndarray:
        """Read-only (height, width) elevation array."""
        return self._elevations

    @property
    def width(self) -> int:
        return self._elevations.shape[1]

    @property
    def height(self) -> int:
        return self._elevations.shape[0]

    @property
    def dimensions(self) -> Tuple[int, int]:
        """(width, height) in grid points; elevations.shape is the reverse."""
        return self.width, self.height

    @property
    def size(self) -> int:
        return self._elevations.size

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def elevation_at(self, x: int, y: int) -> float:
        """
        Elevation of grid point (x, y).

        Raises:
            InvalidArgument: If (x, y) lies outside the grid.
        """

        if not self.contains(x, y):
            raise InvalidArgument(
                f"Point ({x}, {y}) outside {self.width}x{self.height} height field"
            )
        return float(self._elevations[y, x])

    def min(self) -> float:
        return float(self._elevations.min())

    def max(self) -> float:
        return float(self._elevations.max())

    def __repr__(self) -> str:
        return f"HeightField(width={self.width}, height={self.height})"
