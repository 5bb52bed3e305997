"""
Command line entry point: generate a terrain scene and summarize it.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .compatibility.options import ApplicationOptions
from .engine.terrain_composer import TerrainComposer, TerrainScene
from .errors import InvalidArgument
from .procgen.grammar import default_registry

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terragen",
        description="Generate procedural terrain and cut it into mesh chunks"
    )
    parser.add_argument("--options", type=str, help="XML or JSON options file")
    parser.add_argument("--preset", type=str, default="default",
                        choices=["default", "small"],
                        help="Preset used when no options file is given")
    parser.add_argument("--generator", type=str, default="diamond_square",
                        choices=default_registry().list_generators(),
                        help="Height field generator")
    parser.add_argument("--seed", type=int, help="Random seed (default: time-based)")
    parser.add_argument("--iterations", type=int, help="Override diamond-square iterations")
    parser.add_argument("--roughness", type=float, help="Override roughness")
    parser.add_argument("--chunk-size", type=int, help="Override maximum chunk size")
    parser.add_argument("--workers", type=int, help="Threads for chunk extraction")
    parser.add_argument("--regenerate", type=int, default=0,
                        help="Regenerate the terrain this many extra times")
    parser.add_argument("--progress", action="store_true", help="Show chunk progress bar")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def load_options(args: argparse.Namespace) -> ApplicationOptions:
    """Options file or preset, with command line overrides applied."""

    if args.options:
        options = ApplicationOptions.from_file(args.options)
    else:
        options = ApplicationOptions.preset(args.preset)

    return options.with_overrides(
        seed=args.seed,
        iterations=args.iterations,
        roughness=args.roughness,
        chunk_size=args.chunk_size
    ).validate()


def print_summary(scene: TerrainScene):
    terrain = scene.terrain
    extent_x, extent_z = terrain.world_extent()
    framing = scene.framing

    print(f"Terrain: {terrain.width}x{terrain.height} points "
          f"({extent_x:g} x {extent_z:g} world units), generator={scene.generator}")
    print(f"  Seed: {scene.seed}")
    print(f"  Height range: {terrain.min_height:.3f} to {terrain.max_height:.3f}")
    print(f"  Chunks: {len(scene.chunks)} (max {scene.options.chunk_size} vertices per side)")
    print(f"  Vertices: {scene.vertex_count}  Triangles: {scene.triangle_count}")
    print(f"  Camera: center={framing.center} radius={framing.radius:g}")
    print(f"  Render mode: {scene.options.render_mode.value}")
    print(f"  Built in {scene.build_seconds:.3f}s")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for terrain generation."""

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.regenerate < 0:
        parser.error(f"--regenerate must be >= 0, got {args.regenerate}")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        options = load_options(args)
        composer = TerrainComposer(
            options,
            generator=args.generator,
            workers=args.workers,
            progress=args.progress
        )

        scene = composer.regenerate()
        print_summary(scene)

        for _ in range(args.regenerate):
            log.info("Regenerating terrain...")
            scene = composer.regenerate()
            print_summary(scene)
    except InvalidArgument as e:
        print(f"terragen: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
