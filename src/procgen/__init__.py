"""
Procedural terrain synthesis.

This package provides:
- Coherent 3D noise (OpenSimplex by default, jit-compiled Perlin as fast path)
- Fractal elevation synthesis with flatland and plateau shaping
- Parameter snapshots and the interactive control table
"""

from .core import TerrainSynthesizer, shape_elevation, shape_elevations
from .grammar import ControlRegistry, ParameterSpec, default_registry
from .modules.noise import DEFAULT_SEED, NoiseField, NoiseSource
from .params import (
    AtmosphereParameters,
    GenerationParameters,
    PreconditionViolation,
    SceneSettings,
    StarType,
    ThirdGas,
)

__all__ = [
    "TerrainSynthesizer",
    "shape_elevation",
    "shape_elevations",
    "NoiseSource",
    "NoiseField",
    "DEFAULT_SEED",
    "ParameterSpec",
    "ControlRegistry",
    "default_registry",
    "GenerationParameters",
    "AtmosphereParameters",
    "SceneSettings",
    "StarType",
    "ThirdGas",
    "PreconditionViolation",
]
