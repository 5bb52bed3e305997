"""
Scene assembly and wholesale terrain regeneration.

A TerrainScene bundles one generated height field with its TerrainData and
chunk set. Regenerating never touches the current scene: the composer
builds a complete new one and then swaps the reference it hands out.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..compatibility.options import ApplicationOptions
from ..procgen.diamond_square import grid_side
from ..procgen.grammar import GeneratorRegistry, default_registry
from ..procgen.random_source import NumpyRandomSource, RandomSource
from .chunk_extractor import MeshChunk, extract_chunks
from .heightfield import HeightField
from .terrain_data import TerrainData

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraFraming:
    """Orbit camera placement that frames the whole terrain."""

    center: Tuple[float, float, float]
    radius: float
    phi: float

    @classmethod
    def for_terrain(cls, terrain: TerrainData) -> "CameraFraming":
        cx, _, cz = terrain.cell_size
        half_x = cx * terrain.width / 2.0
        half_z = cz * terrain.height / 2.0
        return cls(center=(half_x, 0.0, half_z), radius=half_x + half_z, phi=math.pi / 4.0)


@dataclass(frozen=True, eq=False)
class TerrainScene:
    """
    One immutable generation result.

    Attributes:
        height_field: Generated elevations
        terrain: World-space attributes built from height_field
        chunks: Mesh chunks in row-major order
        options: Options the scene was built from
        generator: Registry name of the generator used
        seed: Seed of the random source, None for deterministic generators
        framing: Camera placement covering the terrain
        build_seconds: Wall time spent building the scene
    """

    height_field: HeightField
    terrain: TerrainData
    chunks: Tuple[MeshChunk, ...]
    options: ApplicationOptions
    generator: str
    seed: Optional[int]
    framing: CameraFraming
    build_seconds: float

    @property
    def vertex_count(self) -> int:
        return sum(chunk.vertex_count for chunk in self.chunks)

    @property
    def triangle_count(self) -> int:
        return sum(chunk.triangle_count for chunk in self.chunks)

    def material_parameters(self) -> Dict[str, Any]:
        """Uniform values the terrain material blends textures with."""

        return {
            "MinTerrainHeight": self.terrain.min_height,
            "MaxTerrainHeight": self.terrain.max_height,
            "UVScale": self.options.uv_scale,
        }


def generator_parameters(name: str, options: ApplicationOptions) -> Dict[str, Any]:
    """
    Map options onto the keyword arguments of a registered generator.

    The Gaussian generator produces a single bump covering a grid of the
    same size diamond-square would, peaking at max_seed_height.
    """

    if name == "diamond_square":
        return {
            "roughness": options.roughness,
            "max_seed_height": options.max_seed_height,
            "iterations": options.iterations,
        }

    if name == "gaussian":
        side = grid_side(options.iterations)
        middle = (side - 1) / 2.0
        return {
            "width": side,
            "height": side,
            "sigma": (side / 6.0, side / 6.0),
            "amplitude": options.max_seed_height,
            "center": (middle, middle),
            "falloff_radius": middle,
        }

    raise KeyError(name)


class TerrainComposer:
    """
    Builds terrain scenes and swaps them in on regeneration.

    Args:
        options: Validated application options
        generator: Registry name of the height field generator
        registry: Generator registry, defaults to the built-in one
        random_source_factory: Called with a seed (or None) to create the
            random source for each build. Defaults to NumpyRandomSource.
        workers: Threads used for chunk extraction
        progress: Show a progress bar while extracting chunks
    """

    def __init__(
        self,
        options: Optional[ApplicationOptions] = None,
        generator: str = "diamond_square",
        registry: Optional[GeneratorRegistry] = None,
        random_source_factory: Optional[Callable[[Optional[int]], RandomSource]] = None,
        workers: Optional[int] = None,
        progress: bool = False
    ):
        self.options = (options or ApplicationOptions.default()).validate()
        self.registry = registry or default_registry()
        if generator not in self.registry:
            raise KeyError(f"Unknown generator: {generator}")

        self.generator = generator
        self.random_source_factory = random_source_factory or NumpyRandomSource
        self.workers = workers
        self.progress = progress

        self._lock = threading.Lock()
        self._scene: Optional[TerrainScene] = None
        self._scene_build = -1
        self._next_build = 0
        self.generation = 0

    @property
    def scene(self) -> Optional[TerrainScene]:
        """Current scene, or None before the first build."""
        with self._lock:
            return self._scene

    def build_scene(
        self,
        seed: Optional[int] = None,
        build_number: Optional[int] = None
    ) -> TerrainScene:
        """
        Generate a complete scene without installing it.

        Args:
            seed: Overrides options.seed for this build
            build_number: Position in the seed sequence. Defaults to the
                number the next regenerate() call would reserve.

        Returns:
            New TerrainScene
        """

        start_time = time.perf_counter()
        options = self.options
        if build_number is None:
            with self._lock:
                build_number = self._next_build
        if seed is None and options.seed is not None:
            # Successive regenerations walk a reproducible seed sequence
            seed = options.seed + build_number

        random_source = None
        if self.registry.stochastic[self.generator]:
            random_source = self.random_source_factory(seed)
            seed = getattr(random_source, "seed", seed)
        else:
            seed = None

        log.info("Creating Height Data...")
        parameters = generator_parameters(self.generator, options)
        height_field = self.registry.generate(self.generator, parameters, random_source)
        terrain = TerrainData.from_height_field(height_field, options.cell_size, options.uv_scale)

        log.info("Creating Mesh Data...")
        chunks: List[MeshChunk] = extract_chunks(
            terrain, options.chunk_size, workers=self.workers, progress=self.progress
        )

        scene = TerrainScene(
            height_field=height_field,
            terrain=terrain,
            chunks=tuple(chunks),
            options=options,
            generator=self.generator,
            seed=seed,
            framing=CameraFraming.for_terrain(terrain),
            build_seconds=time.perf_counter() - start_time
        )

        log.info(
            "Built %dx%d terrain (seed=%s) into %d chunks in %.3fs",
            terrain.width, terrain.height, seed, len(chunks), scene.build_seconds
        )

        return scene

    def regenerate(self, seed: Optional[int] = None) -> TerrainScene:
        """
        Build a new scene and make it current.

        The previous scene stays current until the new one is complete. If
        building fails the error propagates and nothing is swapped. Each
        call reserves its place in the seed sequence before building, and a
        build never replaces a scene from a later reservation.
        """

        with self._lock:
            build_number = self._next_build
            self._next_build += 1

        scene = self.build_scene(seed, build_number)

        with self._lock:
            if build_number > self._scene_build:
                self._scene = scene
                self._scene_build = build_number
            self.generation += 1

        return scene
