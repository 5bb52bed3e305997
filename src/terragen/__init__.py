"""
Procedural terrain synthesis and chunked meshing.

Generators produce a HeightField, TerrainData places it in world space,
and extract_chunks cuts it into bounded-size mesh chunks.
"""

from .errors import InvalidArgument
from .engine import HeightField, TerrainData, MeshChunk, ChunkLayout, extract_chunks
from .procgen import (
    NumpyRandomSource, generate_random, generate_gaussian, default_registry
)
from .compatibility import ApplicationOptions, RenderMode
from .engine.terrain_composer import TerrainComposer, TerrainScene, CameraFraming

__version__ = "0.1.0"

__all__ = [
    "InvalidArgument",
    "HeightField",
    "TerrainData",
    "MeshChunk",
    "ChunkLayout",
    "extract_chunks",
    "NumpyRandomSource",
    "generate_random",
    "generate_gaussian",
    "default_registry",
    "ApplicationOptions",
    "RenderMode",
    "TerrainComposer",
    "TerrainScene",
    "CameraFraming"
]
