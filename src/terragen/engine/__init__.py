"""
Height field to mesh geometry.

Wraps generated height fields in world space and partitions them into
self-contained mesh chunks for incremental rendering.
"""

from .heightfield import HeightField
from .terrain_data import TerrainData
from .chunk_extractor import MeshChunk, ChunkLayout, extract_chunks

__all__ = ["HeightField", "TerrainData", "MeshChunk", "ChunkLayout", "extract_chunks"]
