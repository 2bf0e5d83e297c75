#!/usr/bin/env python3
"""
Generate a planet mesh from the command line and report its statistics.
"""

import argparse
import json
import sys
import time

from src.engine import PlanetAnalyzer, PlanetMeshBuilder, icosphere, uv_sphere
from src.procgen import GenerationParameters, NoiseField, PreconditionViolation, TerrainSynthesizer
from src.procgen.grammar import GENERATION_SPEC
from src.procgen.modules.noise import DEFAULT_SEED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Procedural planet generator")

    for name, (min_val, max_val, default) in GENERATION_SPEC.params.items():
        flag = "--" + name.replace("_", "-")
        kind = int if name in GENERATION_SPEC.integers else float
        parser.add_argument(flag, type=kind, default=default,
                            help=f"{name} (slider range {min_val} to {max_val}, default {default})")

    parser.add_argument("--sphere", choices=["uv", "ico"], default="uv", help="Base sphere layout")
    parser.add_argument("--segments", type=int, default=128, help="UV sphere width and height segments")
    parser.add_argument("--subdivisions", type=int, default=5, help="Icosphere subdivision level")
    parser.add_argument("--backend", choices=["simplex", "jax"], default="simplex", help="Noise backend")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Noise seed")
    parser.add_argument("--json", action="store_true", help="Print the full analysis as JSON")
    return parser


def make_noise(backend: str, seed: int):
    if backend == "jax":
        from src.procgen.jax_backend import JaxNoiseField
        return JaxNoiseField(seed=seed)
    return NoiseField(seed=seed)


def main(argv=None) -> int:
    """CLI entry point."""

    args = build_parser().parse_args(argv)

    try:
        params = GenerationParameters(**{
            name: getattr(args, name) for name in GENERATION_SPEC.get_param_names()
        })
        if args.sphere == "ico":
            base = icosphere(args.subdivisions)
        else:
            base = uv_sphere(args.segments, args.segments)
    except PreconditionViolation as e:
        print(f"✗ Invalid input: {e}")
        return 2

    _, range_errors = GENERATION_SPEC.check(params.as_dict())
    for error in range_errors:
        print(f"Note: {error} (outside the viewer slider range)")

    if params.is_degenerate:
        print(f"Note: flatland threshold {params.flatland_threshold} is above "
              f"plateau height {params.plateau_height}; flatland shaping wins")

    builder = PlanetMeshBuilder(TerrainSynthesizer(make_noise(args.backend, args.seed)))

    start_time = time.time()
    try:
        mesh = builder.build(base, params)
    except PreconditionViolation as e:
        print(f"✗ Build failed: {e}")
        return 2
    generation_time = time.time() - start_time

    analysis = PlanetAnalyzer().analyze(mesh)

    if args.json:
        print(json.dumps(analysis, indent=2))
        return 0

    stats = analysis["elevation_stats"]
    print(f"✓ Built planet: {mesh.vertex_count} vertices, {mesh.triangle_count} triangles "
          f"({args.backend} noise, seed {args.seed})")
    print(f"  Generation time: {generation_time:.3f}s")
    print(f"  Surface elevation: {stats['min']:.5f} to {stats['max']:.5f} (mean {stats['mean']:.5f})")
    print(f"  Relief: mean {analysis['relief']['mean_angle']:.3f} deg, "
          f"max {analysis['relief']['max_angle']:.3f} deg")
    print("  Biome coverage:")
    for biome, fraction in analysis["biome_coverage"].items():
        print(f"    {biome:<7} {fraction * 100:6.2f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
