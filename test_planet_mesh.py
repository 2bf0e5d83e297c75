"""
Tests for base spheres, mesh building and vertex normals.
"""

import numpy as np
import pytest

from src.engine import (
    Biome,
    BaseSphere,
    PlanetMeshBuilder,
    compute_vertex_normals,
    icosphere,
    uv_sphere,
)
from src.procgen import (
    GenerationParameters,
    NoiseField,
    NoiseSource,
    PreconditionViolation,
    TerrainSynthesizer,
)


class ConstantNoise(NoiseSource):
    def __init__(self, value: float):
        self.value = value

    def sample3d(self, x, y, z):
        return self.value


def single_vertex(direction=(0.0, 0.0, 1.0)) -> BaseSphere:
    return BaseSphere(np.array([direction], dtype=np.float64), np.zeros((0, 3), dtype=np.int32))


def constant_builder(value: float) -> PlanetMeshBuilder:
    return PlanetMeshBuilder(TerrainSynthesizer(ConstantNoise(value)))


def triangle_orientation(positions, indices):
    """Dot of each face normal with its centroid; positive means outward."""

    a, b, c = (positions[indices[:, i]] for i in range(3))
    face_normals = np.cross(b - a, c - a)
    return np.sum(face_normals * (a + b + c), axis=1)


SCENARIO = GenerationParameters(
    amplitude=5.0,
    frequency=1.5,
    octaves=1,
    persistence=0.5,
    flatland_threshold=0.1,
    plateau_height=1.5,
    noise_strength=0.05
)


# Base spheres

@pytest.mark.parametrize("width, height", [(3, 2), (8, 6), (32, 16)])
def test_uv_sphere_layout(width, height):
    sphere = uv_sphere(width, height)

    assert sphere.vertex_count == (width + 1) * (height + 1)
    assert sphere.triangle_count == width * (2 * height - 2)
    np.testing.assert_allclose(np.linalg.norm(sphere.positions, axis=1), 1.0)
    assert np.all(triangle_orientation(sphere.positions, sphere.indices) > 0)


@pytest.mark.parametrize("level", [0, 1, 3])
def test_icosphere_layout(level):
    sphere = icosphere(level)

    assert sphere.vertex_count == 10 * 4 ** level + 2
    assert sphere.triangle_count == 20 * 4 ** level
    np.testing.assert_allclose(np.linalg.norm(sphere.positions, axis=1), 1.0)
    assert np.all(triangle_orientation(sphere.positions, sphere.indices) > 0)

    # Closed surface: every edge is shared by exactly two triangles
    edges = np.sort(sphere.indices[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2), axis=1)
    _, counts = np.unique(edges, axis=0, return_counts=True)
    assert np.all(counts == 2)


def test_base_sphere_is_read_only():
    sphere = uv_sphere(8, 6)
    with pytest.raises(ValueError):
        sphere.positions[0, 0] = 5.0
    with pytest.raises(ValueError):
        sphere.indices[0, 0] = 1


def test_base_sphere_rejects_bad_input():
    with pytest.raises(PreconditionViolation):
        uv_sphere(2, 2)
    with pytest.raises(PreconditionViolation):
        BaseSphere(np.zeros((0, 3)), np.zeros((0, 3)))
    with pytest.raises(PreconditionViolation):
        BaseSphere(np.eye(3), np.array([[0, 1, 3]]))


# Builder

def test_constant_noise_single_vertex():
    """Elevation 1.0 displaces by noise_strength / 10 per unit."""

    mesh = constant_builder(0.2).build(single_vertex(), SCENARIO)

    np.testing.assert_allclose(mesh.positions[0], (0.0, 0.0, 1.005))
    assert mesh.elevations[0] == pytest.approx(1.0)
    assert mesh.surface_elevations[0] == pytest.approx(0.005)
    assert mesh.biomes[0] == Biome.FOREST

    weaker = SCENARIO.replace(noise_strength=0.005)
    mesh = constant_builder(0.2).build(single_vertex(), weaker)

    np.testing.assert_allclose(mesh.positions[0], (0.0, 0.0, 1.0005))
    assert mesh.biomes[0] == Biome.DESERT
    np.testing.assert_allclose(mesh.colors[0], Biome.DESERT.color, rtol=1e-6)

    # A vertex without faces keeps its radial direction as normal
    np.testing.assert_allclose(mesh.normals[0], (0.0, 0.0, 1.0))


def test_color_follows_displaced_surface():
    """Negative elevation sinks the vertex and colors it as desert."""

    mesh = constant_builder(-0.5).build(single_vertex((1.0, 0.0, 0.0)), SCENARIO)

    assert mesh.elevations[0] == pytest.approx(-1.25)
    assert np.linalg.norm(mesh.positions[0]) == pytest.approx(1.0 - 0.005 * 1.25)
    assert mesh.biomes[0] == Biome.DESERT


def test_displacement_is_radial_and_bounded():
    params = GenerationParameters()
    base = uv_sphere(24, 12)
    mesh = PlanetMeshBuilder().build(base, params)

    ratio = np.linalg.norm(mesh.positions, axis=1) / np.linalg.norm(base.positions, axis=1)
    np.testing.assert_allclose(ratio, 1.0 + params.displacement_factor * mesh.elevations)
    assert np.all(ratio <= 1.0 + params.displacement_factor * params.plateau_height + 1e-12)

    # Direction of every vertex is preserved
    directions = mesh.positions / np.linalg.norm(mesh.positions, axis=1)[:, None]
    np.testing.assert_allclose(directions, base.positions, atol=1e-12)


def test_build_is_deterministic_and_shares_topology():
    base = uv_sphere(16, 8)
    builder = PlanetMeshBuilder(TerrainSynthesizer(NoiseField(seed=9)))
    params = GenerationParameters(octaves=3)

    first = builder.build(base, params)
    second = builder.build(base, params)

    np.testing.assert_array_equal(first.positions, second.positions)
    np.testing.assert_array_equal(first.colors, second.colors)
    np.testing.assert_array_equal(first.normals, second.normals)
    assert first.indices is base.indices
    assert first.vertex_count == base.vertex_count


def test_normals_are_unit_and_outward():
    for base in (uv_sphere(16, 12), icosphere(2)):
        mesh = PlanetMeshBuilder().build(base, GenerationParameters())

        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)
        radial = mesh.positions / np.linalg.norm(mesh.positions, axis=1)[:, None]
        assert np.all(np.sum(mesh.normals * radial, axis=1) > 0.9)


def test_seam_and_pole_vertices_share_normals():
    width, height = 16, 10
    mesh = PlanetMeshBuilder().build(uv_sphere(width, height), GenerationParameters())
    row = width + 1

    for iy in range(height + 1):
        np.testing.assert_allclose(mesh.normals[iy * row], mesh.normals[iy * row + width], atol=1e-12)

    north = mesh.normals[:row]
    south = mesh.normals[height * row:]
    np.testing.assert_allclose(north, np.repeat(north[:1], row, axis=0), atol=1e-12)
    np.testing.assert_allclose(south, np.repeat(south[:1], row, axis=0), atol=1e-12)
    assert north[0, 1] > 0.9
    assert south[0, 1] < -0.9


def test_normals_weight_faces_by_area():
    positions = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 3.0],
    ])
    # Small triangle facing +Z, larger triangle facing +X
    indices = np.array([[0, 1, 2], [0, 2, 3]])

    normals = compute_vertex_normals(positions, indices)

    expected = np.array([1.5, 0.0, 0.5])
    np.testing.assert_allclose(normals[0], expected / np.linalg.norm(expected))
    np.testing.assert_allclose(normals[1], (0.0, 0.0, 1.0))


def test_zero_length_vertex_is_rejected():
    positions = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    base = BaseSphere(positions, np.array([[0, 1, 2]]))

    with pytest.raises(PreconditionViolation, match="vertex 1"):
        PlanetMeshBuilder().build(base, GenerationParameters())


def test_colors_rgba8():
    mesh = constant_builder(0.2).build(single_vertex(), SCENARIO)
    rgba = mesh.colors_rgba8()

    assert rgba.dtype == np.uint8
    assert rgba.shape == (1, 4)
    assert rgba[0, 3] == 255


@pytest.mark.parametrize("constant, noise_strength", [
    (-1.0, 10.0),   # elevation -2.5, scale -1.5
    (-0.5, 8.0),    # elevation -1.25, scale 0
])
def test_displacement_through_origin_is_rejected(constant, noise_strength):
    params = GenerationParameters(noise_strength=noise_strength, octaves=1, amplitude=5.0)

    with pytest.raises(PreconditionViolation, match="vertex 0"):
        constant_builder(constant).build(single_vertex(), params)


def test_large_noise_strength_on_raised_terrain_is_allowed():
    params = GenerationParameters(noise_strength=10.0, octaves=1, amplitude=5.0)
    mesh = constant_builder(0.2).build(single_vertex(), params)

    np.testing.assert_allclose(mesh.positions[0], (0.0, 0.0, 2.0))
    assert mesh.biomes[0] == Biome.SNOW
