"""
World-space terrain attributes derived from a height field.

TerrainData scales grid coordinates by a 3-component cell size and
produces the per-vertex positions, normals and UVs the mesh builder
uploads, along with the elevation range the material system blends on.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np

from ..errors import InvalidArgument
from .heightfield import HeightField

log = logging.getLogger(__name__)

Vector2 = Tuple[float, float]
Vector3 = Tuple[float, float, float]


def _as_vector(values: Sequence[float], length: int, name: str) -> Tuple[float, ...]:
    try:
        vector = tuple(float(v) for v in values)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{name} must be a sequence of {length} numbers, got {values!r}")

    if len(vector) != length:
        raise InvalidArgument(f"{name} must have {length} components, got {len(vector)}")
    if not all(math.isfinite(v) for v in vector):
        raise InvalidArgument(f"{name} must be finite, got {vector}")

    return vector


class TerrainData:
    """
    A height field placed in world space.

    Grid point (x, y) maps to world (x * cell_size.x, elevation * cell_size.y,
    y * cell_size.z). Attribute buffers are row-major over the grid, so
    vertex (x, y) lives at index y * width + x.

    Instances never change after construction. Replacing the field means
    building a new TerrainData.
    """

    def __init__(
        self,
        field: HeightField,
        cell_size: Sequence[float],
        uv_scale: Sequence[float] = (1.0, 1.0)
    ):
        if not isinstance(field, HeightField):
            raise InvalidArgument(f"field must be a HeightField, got {type(field).__name__}")

        cell = _as_vector(cell_size, 3, "cell_size")
        if cell[0] <= 0 or cell[2] <= 0:
            raise InvalidArgument(f"cell_size x and z must be > 0, got {cell}")
        if cell[1] == 0:
            raise InvalidArgument("cell_size y must be non-zero")

        self._field = field
        self._cell_size: Vector3 = cell
        self._uv_scale: Vector2 = _as_vector(uv_scale, 2, "uv_scale")

        # Scaled extremes, ordered so a negative vertical scale still gives min <= max
        low = field.min() * cell[1]
        high = field.max() * cell[1]
        self._min_height = min(low, high)
        self._max_height = max(low, high)

        self._positions: Optional[np.ndarray] = None
        self._normals: Optional[np.ndarray] = None
        self._uvs: Optional[np.ndarray] = None

        log.debug(
            "TerrainData %dx%d cell=%s height range [%.4g, %.4g]",
            field.width, field.height, cell, self._min_height, self._max_height
        )

    @classmethod
    def from_height_field(
        cls,
        field: HeightField,
        cell_size: Sequence[float],
        uv_scale: Sequence[float] = (1.0, 1.0)
    ) -> "TerrainData":
        """Wrap field with a world-space cell size."""
        return cls(field, cell_size, uv_scale)

    @property
    def field(self) -> HeightField:
        return self._field

    @property
    def cell_size(self) -> Vector3:
        return self._cell_size

    @property
    def uv_scale(self) -> Vector2:
        return self._uv_scale

    @property
    def width(self) -> int:
        return self._field.width

    @property
    def height(self) -> int:
        return self._field.height

    @property
    def min_height(self) -> float:
        return self._min_height

    @property
    def max_height(self) -> float:
        return self._max_height

    def world_extent(self) -> Tuple[float, float]:
        """World-space size (x, z) covered by the grid."""
        return (self.width - 1) * self._cell_size[0], (self.height - 1) * self._cell_size[2]

    def _check_point(self, x: int, y: int):
        if not self._field.contains(x, y):
            raise InvalidArgument(
                f"Point ({x}, {y}) outside {self.width}x{self.height} terrain"
            )

    def vertex_at(self, x: int, y: int) -> np.ndarray:
        """World-space position of grid point (x, y)."""

        self._check_point(x, y)
        cx, cy, cz = self._cell_size
        return np.array([x * cx, self._field.elevations[y, x] * cy, y * cz])

    def normal_at(self, x: int, y: int) -> np.ndarray:
        """Unit surface normal at grid point (x, y)."""

        self._check_point(x, y)
        return self.normal_grid()[y, x].astype(np.float64)

    # ------------------------------------------------------------------
    # Whole-grid attribute buffers
    # ------------------------------------------------------------------

    def position_grid(self) -> np.ndarray:
        """(height, width, 3) world positions."""

        if self._positions is None:
            cx, cy, cz = self._cell_size
            ys, xs = np.mgrid[0:self.height, 0:self.width]

            positions = np.empty((self.height, self.width, 3), dtype=np.float64)
            positions[..., 0] = xs * cx
            positions[..., 1] = self._field.elevations * cy
            positions[..., 2] = ys * cz
            positions.setflags(write=False)
            self._positions = positions

        return self._positions

    def normal_grid(self) -> np.ndarray:
        """
        (height, width, 3) unit normals.

        Tangents come from central differences of neighbouring world
        positions along x and z, falling back to one-sided differences on
        the border. The normal is tangent_z x tangent_x, which points along
        +Y on flat ground.
        """

        if self._normals is None:
            positions = self.position_grid()

            tangent_x = np.gradient(positions, axis=1)
            tangent_z = np.gradient(positions, axis=0)

            normals = np.cross(tangent_z, tangent_x)
            normals /= np.linalg.norm(normals, axis=-1, keepdims=True)
            normals.setflags(write=False)
            self._normals = normals

        return self._normals

    def uv_grid(self) -> np.ndarray:
        """(height, width, 2) texture coordinates: world XZ times uv_scale."""

        if self._uvs is None:
            positions = self.position_grid()
            su, sv = self._uv_scale

            uvs = np.empty((self.height, self.width, 2), dtype=np.float64)
            uvs[..., 0] = positions[..., 0] * su
            uvs[..., 1] = positions[..., 2] * sv
            uvs.setflags(write=False)
            self._uvs = uvs

        return self._uvs

    def positions(self) -> np.ndarray:
        """Row-major (width * height, 3) position buffer."""
        return self.position_grid().reshape(-1, 3)

    def normals(self) -> np.ndarray:
        """Row-major (width * height, 3) normal buffer."""
        return self.normal_grid().reshape(-1, 3)

    def uvs(self) -> np.ndarray:
        """Row-major (width * height, 2) UV buffer."""
        return self.uv_grid().reshape(-1, 2)

    def __repr__(self) -> str:
        return (
            f"TerrainData(width={self.width}, height={self.height}, "
            f"cell_size={self._cell_size}, min_height={self._min_height:.4g}, "
            f"max_height={self._max_height:.4g})"
        )
