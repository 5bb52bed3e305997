"""
Partition terrain into self-contained mesh chunks.

Chunks tile the vertex grid left-to-right, then top-to-bottom. Neighbouring
chunks both own a copy of their shared border row/column of vertices, so
their edges coincide in world space while every index buffer only refers
to its own chunk's vertices.
"""

import logging
import numbers
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ..errors import InvalidArgument
from .terrain_data import TerrainData

log = logging.getLogger(__name__)

Span = Tuple[int, int]


@dataclass(frozen=True, eq=False)
class MeshChunk:
    """
    Independently drawable piece of terrain geometry.

    Attributes:
        positions: (N, 3) float32 world positions, row-major within the chunk
        normals: (N, 3) float32 unit normals
        uvs: (N, 2) float32 texture coordinates
        indices: (T * 3,) uint32 triangle list into this chunk's vertices
        origin: (x0, y0) grid point the chunk starts at
        extent: (w, h) chunk size in grid points
        index: Position in row-major chunk order
        grid_coords: (column, row) of the chunk in the chunk grid
    """

    positions: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray
    indices: np.ndarray
    origin: Tuple[int, int]
    extent: Tuple[int, int]
    index: int
    grid_coords: Tuple[int, int]

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def triangles(self) -> np.ndarray:
        """Indices reshaped to (T, 3)."""
        return self.indices.reshape(-1, 3)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """World-space axis-aligned bounding box (min xyz, max xyz)."""
        return self.positions.min(axis=0), self.positions.max(axis=0)


def axis_spans(count: int, max_chunk_size: int) -> List[Span]:
    """
    Split `count` grid points into overlapping (start, length) spans.

    Spans start every max_chunk_size - 1 points, so consecutive spans share
    exactly one point and the last one ends on the final point.
    """

    stride = max_chunk_size - 1
    return [
        (start, min(max_chunk_size, count - start))
        for start in range(0, count - 1, stride)
    ]


class ChunkLayout:
    """
    Tile arrangement of a width x height vertex grid.

    Args:
        width: Grid points along x
        height: Grid points along y
        max_chunk_size: Largest chunk side in vertices, at least 2
    """

    def __init__(self, width: int, height: int, max_chunk_size: int):
        if isinstance(max_chunk_size, bool) or not isinstance(max_chunk_size, numbers.Integral):
            raise InvalidArgument(f"max_chunk_size must be an integer, got {max_chunk_size!r}")
        if max_chunk_size < 2:
            raise InvalidArgument(f"max_chunk_size must be >= 2, got {max_chunk_size}")
        if width < 2 or height < 2:
            raise InvalidArgument(f"Cannot chunk a {width}x{height} grid")

        self.width = width
        self.height = height
        self.max_chunk_size = int(max_chunk_size)
        self.spans_x = axis_spans(width, self.max_chunk_size)
        self.spans_y = axis_spans(height, self.max_chunk_size)

    @property
    def columns(self) -> int:
        return len(self.spans_x)

    @property
    def rows(self) -> int:
        return len(self.spans_y)

    @property
    def chunk_count(self) -> int:
        return self.columns * self.rows

    def __len__(self) -> int:
        return self.chunk_count

    def __iter__(self) -> Iterator[Tuple[int, int, int, int, int, int]]:
        """Yield (column, row, x0, y0, w, h) in row-major chunk order."""

        for row, (y0, h) in enumerate(self.spans_y):
            for column, (x0, w) in enumerate(self.spans_x):
                yield column, row, x0, y0, w, h


def grid_indices(width: int, height: int) -> np.ndarray:
    """
    Triangle list for a width x height vertex grid.

    Each quad becomes (v00, v01, v10) and (v10, v01, v11), with v01 one row
    further along +Z. With +Y up this winds counter-clockwise seen from
    above, so the face normals point upward.
    """

    j, i = np.mgrid[0:height - 1, 0:width - 1]

    v00 = j * width + i
    v10 = v00 + 1
    v01 = v00 + width
    v11 = v01 + 1

    first = np.stack([v00, v01, v10], axis=-1)
    second = np.stack([v10, v01, v11], axis=-1)

    # Two triangles per quad, quads in row-major order
    return np.stack([first, second], axis=-2).reshape(-1).astype(np.uint32)


def _frozen(array: np.ndarray, dtype) -> np.ndarray:
    result = np.ascontiguousarray(array, dtype=dtype)
    result.setflags(write=False)
    return result


def _build_chunk(
    terrain: TerrainData,
    index: int,
    column: int, row: int,
    x0: int, y0: int,
    w: int, h: int
) -> MeshChunk:
    """Copy one tile's attributes out of the terrain buffers."""

    window = (slice(y0, y0 + h), slice(x0, x0 + w))

    return MeshChunk(
        positions=_frozen(terrain.position_grid()[window].reshape(-1, 3), np.float32),
        normals=_frozen(terrain.normal_grid()[window].reshape(-1, 3), np.float32),
        uvs=_frozen(terrain.uv_grid()[window].reshape(-1, 2), np.float32),
        indices=_frozen(grid_indices(w, h), np.uint32),
        origin=(x0, y0),
        extent=(w, h),
        index=index,
        grid_coords=(column, row)
    )


def extract_chunks(
    terrain: TerrainData,
    max_chunk_size: int,
    workers: Optional[int] = None,
    progress: bool = False
) -> List[MeshChunk]:
    """
    Partition terrain into mesh chunks of at most max_chunk_size squared vertices.

    Args:
        terrain: Source terrain; read only
        max_chunk_size: Largest chunk side in vertices, at least 2
        workers: Thread count for building chunks in parallel. None or 1
            builds them on the calling thread.
        progress: Show a tqdm progress bar

    Returns:
        Chunks in row-major order. Total triangle count is always
        2 * (width - 1) * (height - 1).

    Raises:
        InvalidArgument: If max_chunk_size < 2 or workers < 1.
    """

    layout = ChunkLayout(terrain.width, terrain.height, max_chunk_size)

    if workers is not None:
        if isinstance(workers, bool) or not isinstance(workers, numbers.Integral) or workers < 1:
            raise InvalidArgument(f"workers must be a positive integer, got {workers!r}")

    # Populate the cached buffers before any worker reads them
    terrain.position_grid()
    terrain.normal_grid()
    terrain.uv_grid()

    tiles = [(index,) + tile for index, tile in enumerate(layout)]
    bar = tqdm(total=len(tiles), desc="Chunks", unit="chunk", disable=not progress)

    try:
        if workers is None or workers == 1:
            chunks = []
            for tile in tiles:
                chunks.append(_build_chunk(terrain, *tile))
                bar.update(1)
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(_build_chunk, terrain, *tile) for tile in tiles]
                chunks = []
                for future in futures:
                    chunks.append(future.result())
                    bar.update(1)
    finally:
        bar.close()

    log.debug(
        "Extracted %d chunks (%dx%d) from %dx%d terrain, max size %d",
        len(chunks), layout.columns, layout.rows,
        terrain.width, terrain.height, layout.max_chunk_size
    )

    return chunks
