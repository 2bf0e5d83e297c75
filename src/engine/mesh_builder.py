"""
Planet mesh construction.

Displaces a base sphere by synthesized elevation, recomputes smooth
normals and assigns biome colors. Every build is a full recompute.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..procgen.core import TerrainSynthesizer
from ..procgen.params import GenerationParameters, PreconditionViolation
from .biomes import BiomeClassifier
from .sphere import BaseSphere


@dataclass
class PlanetMesh:
    """
    Output of a build, owned by the caller.

    positions, normals and colors share vertex indexing; indices is the
    base sphere's (read-only) triangle buffer.
    """

    positions: np.ndarray
    normals: np.ndarray
    colors: np.ndarray
    indices: np.ndarray
    elevations: np.ndarray
    biomes: np.ndarray

    @property
    def vertex_count(self) -> int:
        return self.positions.shape[0]

    @property
    def triangle_count(self) -> int:
        return self.indices.shape[0]

    @property
    def surface_elevations(self) -> np.ndarray:
        """Height above the unit sphere after displacement."""
        return np.linalg.norm(self.positions, axis=1) - 1.0

    def colors_rgba8(self) -> np.ndarray:
        """Colors as opaque RGBA bytes, ready for GPU upload."""

        rgba = np.empty((self.vertex_count, 4), dtype=np.uint8)
        rgba[:, :3] = np.clip(np.round(self.colors * 255.0), 0, 255).astype(np.uint8)
        rgba[:, 3] = 255
        return rgba


def compute_vertex_normals(
    positions: np.ndarray,
    indices: np.ndarray,
    weld_decimals: Optional[int] = 9
) -> np.ndarray:
    """
    Smooth per-vertex normals.

    Face normals are summed unnormalized, so each face contributes in
    proportion to its area. Vertices at the same position (rounded to
    weld_decimals) accumulate together; pass None to disable welding.
    A vertex without faces gets its radial direction.

    Args:
        positions: (N, 3) vertex positions
        indices: (M, 3) triangle indices
        weld_decimals: Rounding used to detect coincident vertices

    Returns:
        (N, 3) unit normals
    """

    positions = np.asarray(positions, dtype=np.float64)
    indices = np.asarray(indices, dtype=np.intp).reshape(-1, 3)

    if weld_decimals is None:
        group = np.arange(positions.shape[0])
        group_count = positions.shape[0]
    else:
        rounded = np.round(positions, weld_decimals) + 0.0  # fold -0.0 into 0.0
        _, group = np.unique(rounded, axis=0, return_inverse=True)
        group = group.reshape(-1)
        group_count = int(group.max()) + 1

    accum = np.zeros((group_count, 3), dtype=np.float64)
    if indices.size:
        a = positions[indices[:, 0]]
        b = positions[indices[:, 1]]
        c = positions[indices[:, 2]]
        face_normals = np.cross(b - a, c - a)
        for corner in range(3):
            np.add.at(accum, group[indices[:, corner]], face_normals)

    normals = accum[group]
    lengths = np.linalg.norm(normals, axis=1)

    missing = lengths <= 1e-20
    if np.any(missing):
        radial = positions[missing]
        normals[missing] = radial
        lengths[missing] = np.linalg.norm(radial, axis=1)

    return normals / lengths[:, None]


class PlanetMeshBuilder:
    """
    Builds planet meshes from a base sphere.

    Steps per build:
    1. normalize every base vertex into a sample direction
    2. synthesize elevation and displace radially by
       1 + (noise_strength / 10) * elevation
    3. classify |displaced| - 1 into a biome color
    4. recompute normals from the displaced positions

    The builder keeps no state between builds.
    """

    def __init__(
        self,
        synthesizer: Optional[TerrainSynthesizer] = None,
        classifier: Optional[BiomeClassifier] = None
    ):
        self.synthesizer = synthesizer if synthesizer is not None else TerrainSynthesizer()
        self.classifier = classifier if classifier is not None else BiomeClassifier()

    def build(self, base_sphere: BaseSphere, params: GenerationParameters) -> PlanetMesh:
        """
        Build a planet mesh.

        Args:
            base_sphere: Unit-radius template; topology is reused as is
            params: Generation parameters snapshot

        Returns:
            Complete PlanetMesh

        Raises:
            PreconditionViolation: If a base vertex has zero or non-finite length,
                or a displacement would turn a vertex through the origin
        """

        positions = base_sphere.positions
        lengths = np.linalg.norm(positions, axis=1)

        bad = np.flatnonzero(~(np.isfinite(lengths) & (lengths > 0.0)))
        if bad.size:
            raise PreconditionViolation(
                f"Base sphere vertex {int(bad[0])} has length {lengths[bad[0]]!r}; "
                f"{bad.size} vertex(es) cannot be turned into a direction"
            )

        directions = positions / lengths[:, None]
        elevations = self.synthesizer.evaluate_many(directions, params)

        scale = 1.0 + params.displacement_factor * elevations

        # A scale <= 0 would collapse the vertex or mirror it through the origin
        inverted = np.flatnonzero(~(scale > 0.0))
        if inverted.size:
            i = int(inverted[0])
            raise PreconditionViolation(
                f"Displacement scale {scale[i]!r} at vertex {i} (elevation {elevations[i]!r}) "
                f"is not positive; noise_strength {params.noise_strength!r} is too large"
            )

        displaced = positions * scale[:, None]

        # Color follows the displaced surface, not the raw elevation
        surface = np.linalg.norm(displaced, axis=1) - 1.0
        biomes = self.classifier.classify_many(surface)
        colors = self.classifier.colors_for(biomes)

        normals = compute_vertex_normals(displaced, base_sphere.indices)

        return PlanetMesh(
            positions=displaced,
            normals=normals,
            colors=colors,
            indices=base_sphere.indices,
            elevations=elevations,
            biomes=biomes
        )
