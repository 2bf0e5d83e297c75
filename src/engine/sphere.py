"""
Base sphere templates.

A base sphere is the fixed-topology mesh every planet is displaced from.
Its arrays are frozen (read-only) so built meshes can share the index buffer.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np

from ..procgen.params import PreconditionViolation


@dataclass(frozen=True)
class BaseSphere:
    """Positions (N, 3) and triangle indices (M, 3) of a template sphere."""

    positions: np.ndarray
    indices: np.ndarray

    def __post_init__(self):
        positions = np.array(self.positions, dtype=np.float64)
        indices = np.array(self.indices, dtype=np.int32).reshape(-1, 3)

        if positions.ndim != 2 or positions.shape[1] != 3:
            raise PreconditionViolation(f"Positions must have shape (N, 3), got {positions.shape}")
        if positions.shape[0] == 0:
            raise PreconditionViolation("Base sphere has no vertices")
        if indices.size and (indices.min() < 0 or indices.max() >= positions.shape[0]):
            raise PreconditionViolation("Triangle indices reference missing vertices")

        positions.setflags(write=False)
        indices.setflags(write=False)
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "indices", indices)

    @property
    def vertex_count(self) -> int:
        return self.positions.shape[0]

    @property
    def triangle_count(self) -> int:
        return self.indices.shape[0]


def uv_sphere(
    width_segments: int = 128,
    height_segments: int = 128,
    radius: float = 1.0
) -> BaseSphere:
    """
    Latitude/longitude sphere.

    Rows run from the north pole (+Y) to the south pole. Each row holds
    width_segments + 1 vertices; the first and last column coincide along
    the seam, and the pole rows are collapsed points. Triangles touching a
    pole are emitted once per quad, so none are degenerate.

    Args:
        width_segments: Number of longitudinal segments (>= 3)
        height_segments: Number of latitudinal segments (>= 2)
        radius: Sphere radius

    Returns:
        BaseSphere with outward-facing (counter-clockwise) triangles
    """

    if width_segments < 3 or height_segments < 2:
        raise PreconditionViolation(
            f"uv_sphere needs >= 3 width and >= 2 height segments, got {width_segments}x{height_segments}"
        )

    u = np.linspace(0.0, 1.0, width_segments + 1)
    v = np.linspace(0.0, 1.0, height_segments + 1)
    phi = u * 2.0 * math.pi
    theta = v * math.pi
    Theta, Phi = np.meshgrid(theta, phi, indexing="ij")

    positions = np.stack([
        -radius * np.cos(Phi) * np.sin(Theta),
        radius * np.cos(Theta),
        radius * np.sin(Phi) * np.sin(Theta)
    ], axis=-1).reshape(-1, 3)

    row = width_segments + 1
    triangles = []
    for iy in range(height_segments):
        for ix in range(width_segments):
            a = iy * row + ix + 1
            b = iy * row + ix
            c = (iy + 1) * row + ix
            d = (iy + 1) * row + ix + 1

            if iy != 0:
                triangles.append((a, b, d))
            if iy != height_segments - 1:
                triangles.append((b, c, d))

    return BaseSphere(positions, np.array(triangles, dtype=np.int32))


_T = (1.0 + math.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = [
    (-1, _T, 0), (1, _T, 0), (-1, -_T, 0), (1, -_T, 0),
    (0, -1, _T), (0, 1, _T), (0, -1, -_T), (0, 1, -_T),
    (_T, 0, -1), (_T, 0, 1), (-_T, 0, -1), (-_T, 0, 1),
]

_ICOSAHEDRON_FACES = [
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
]


def _normalize(v: Tuple[float, float, float], radius: float) -> Tuple[float, float, float]:
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    return (v[0] * radius / length, v[1] * radius / length, v[2] * radius / length)


def icosphere(subdivisions: int = 4, radius: float = 1.0) -> BaseSphere:
    """
    Geodesic sphere from a subdivided icosahedron.

    Each level splits every triangle into four through its edge midpoints,
    pushed back onto the sphere. Vertices are shared, there is no seam.
    Level n has 10 * 4**n + 2 vertices and 20 * 4**n triangles.
    """

    if subdivisions < 0:
        raise PreconditionViolation(f"subdivisions must be >= 0, got {subdivisions}")

    verts: List[Tuple[float, float, float]] = [_normalize(v, radius) for v in _ICOSAHEDRON_VERTICES]
    tris: List[Tuple[int, int, int]] = list(_ICOSAHEDRON_FACES)

    def midpoint(a_idx: int, b_idx: int, cache: Dict[Tuple[int, int], int]) -> int:
        key = (a_idx, b_idx) if a_idx < b_idx else (b_idx, a_idx)
        cached = cache.get(key)
        if cached is not None:
            return cached
        va = verts[a_idx]
        vb = verts[b_idx]
        verts.append(_normalize(((va[0] + vb[0]) * 0.5, (va[1] + vb[1]) * 0.5, (va[2] + vb[2]) * 0.5), radius))
        cache[key] = len(verts) - 1
        return cache[key]

    for _ in range(subdivisions):
        cache: Dict[Tuple[int, int], int] = {}
        new_tris: List[Tuple[int, int, int]] = []
        for a, b, c in tris:
            ab = midpoint(a, b, cache)
            bc = midpoint(b, c, cache)
            ca = midpoint(c, a, cache)
            new_tris.extend([
                (a, ab, ca),
                (b, bc, ab),
                (c, ca, bc),
                (ab, bc, ca),
            ])
        tris = new_tris

    return BaseSphere(np.array(verts, dtype=np.float64), np.array(tris, dtype=np.int32))
