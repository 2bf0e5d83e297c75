"""
Planet mesh analysis.

Summarizes a built planet for the command line report and the viewer HUD.
"""

from typing import Any, Dict

import numpy as np

from .biomes import Biome
from .mesh_builder import PlanetMesh


class PlanetAnalyzer:
    """
    Computes statistics of a planet mesh.

    Relief is measured as the angle between each vertex normal and the
    radial direction: zero on an undisturbed sphere, larger on steep slopes.
    """

    def __init__(self, steep_angle: float = 1.0):
        self.steep_angle = steep_angle

    def analyze(self, mesh: PlanetMesh) -> Dict[str, Any]:
        """
        Comprehensive planet analysis.

        Args:
            mesh: Mesh returned by PlanetMeshBuilder.build

        Returns:
            Dictionary of statistics, JSON serializable
        """

        elevation_stats = self._analyze_elevation(mesh.surface_elevations)
        biome_coverage = self._biome_coverage(mesh.biomes)
        relief = self._analyze_relief(mesh)

        dominant = max(biome_coverage, key=biome_coverage.get)

        return {
            "elevation_stats": elevation_stats,
            "biome_coverage": biome_coverage,
            "relief": relief,
            "classification": {
                "dominant_biome": dominant,
                "dominant_fraction": biome_coverage[dominant]
            },
            "analysis_metadata": {
                "vertex_count": mesh.vertex_count,
                "triangle_count": mesh.triangle_count
            }
        }

    def _analyze_elevation(self, elevations: np.ndarray) -> Dict[str, float]:
        """Analyze post-displacement elevation statistics."""

        return {
            "min": float(np.min(elevations)),
            "max": float(np.max(elevations)),
            "mean": float(np.mean(elevations)),
            "median": float(np.median(elevations)),
            "std": float(np.std(elevations)),
            "range": float(np.max(elevations) - np.min(elevations))
        }

    def _biome_coverage(self, biomes: np.ndarray) -> Dict[str, float]:
        counts = np.bincount(np.asarray(biomes, dtype=np.intp), minlength=len(Biome))
        total = max(1, int(counts.sum()))
        return {biome.name.lower(): float(counts[biome] / total) for biome in Biome}

    def _analyze_relief(self, mesh: PlanetMesh) -> Dict[str, float]:
        radial = mesh.positions / np.linalg.norm(mesh.positions, axis=1)[:, None]
        cosines = np.clip(np.sum(radial * mesh.normals, axis=1), -1.0, 1.0)
        angles = np.degrees(np.arccos(cosines))

        return {
            "mean_angle": float(np.mean(angles)),
            "max_angle": float(np.max(angles)),
            "steep_fraction": float(np.mean(angles > self.steep_angle))
        }
