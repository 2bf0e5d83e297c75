"""
Planet mesh engine.

Builds displaced, biome-colored planet meshes from base sphere templates
and summarizes them.
"""

from .biomes import BIOME_COLORS, BIOME_THRESHOLDS, Biome, BiomeClassifier
from .mesh_builder import PlanetMesh, PlanetMeshBuilder, compute_vertex_normals
from .planet_analyzer import PlanetAnalyzer
from .sphere import BaseSphere, icosphere, uv_sphere

__all__ = [
    "Biome",
    "BiomeClassifier",
    "BIOME_COLORS",
    "BIOME_THRESHOLDS",
    "BaseSphere",
    "uv_sphere",
    "icosphere",
    "PlanetMesh",
    "PlanetMeshBuilder",
    "compute_vertex_normals",
    "PlanetAnalyzer",
]
