"""
Tests for the scene controller and atmosphere uniforms.
"""

import math

import numpy as np
import pytest

from src.engine import PlanetMeshBuilder, uv_sphere
from src.procgen import (
    AtmosphereParameters,
    NoiseField,
    PreconditionViolation,
    StarType,
    TerrainSynthesizer,
)
from src.scene import PlanetScene, atmosphere_uniforms, star_tint


class FailingBuilder(PlanetMeshBuilder):
    """Builds once, then fails every later build."""

    def __init__(self):
        super().__init__()
        self.builds = 0

    def build(self, base_sphere, params):
        self.builds += 1
        if self.builds > 1:
            raise RuntimeError("build failed")
        return super().build(base_sphere, params)


@pytest.fixture
def scene():
    return PlanetScene(base_sphere=uv_sphere(12, 8))


@pytest.fixture
def events(scene):
    received = []
    scene.subscribe(received.append)
    return received


def test_initial_build(scene):
    assert scene.mesh.vertex_count == 13 * 9
    assert scene.rebuild_count == 0
    assert scene.rotation == 0.0


def test_rescale_is_idempotent_and_skips_rebuild(scene, events):
    mesh = scene.mesh

    scene.on_scale_changed(1.5)
    first = scene.scaled_positions()
    scene.on_scale_changed(1.5)
    second = scene.scaled_positions()

    np.testing.assert_array_equal(first, second)
    np.testing.assert_allclose(first, mesh.positions * 1.5)
    assert scene.mesh is mesh
    assert scene.rebuild_count == 0
    assert events == ["rescale", "rescale"]


def test_scale_only_parameter_change_takes_rescale_path(scene, events):
    mesh = scene.on_parameters_changed(planet_scale=0.5)

    assert mesh is scene.mesh
    assert scene.generation.planet_scale == 0.5
    assert scene.rebuild_count == 0
    assert events == ["rescale"]


def test_parameter_change_rebuilds(scene, events):
    before = scene.mesh
    mesh = scene.on_parameters_changed(octaves=2, amplitude=10.0)

    assert mesh is scene.mesh
    assert mesh is not before
    assert scene.generation.octaves == 2
    assert scene.rebuild_count == 1
    assert events == ["rebuild"]
    assert not np.array_equal(mesh.positions, before.positions)


def test_invalid_change_keeps_previous_state(scene, events):
    mesh, params = scene.mesh, scene.generation

    with pytest.raises(PreconditionViolation):
        scene.on_parameters_changed(octaves=0)

    assert scene.mesh is mesh
    assert scene.generation is params
    assert scene.rebuild_count == 0
    assert events == []


def test_failed_build_keeps_previous_mesh():
    scene = PlanetScene(base_sphere=uv_sphere(8, 6), builder=FailingBuilder())
    mesh, params = scene.mesh, scene.generation

    with pytest.raises(RuntimeError):
        scene.on_parameters_changed(frequency=3.0)

    assert scene.mesh is mesh
    assert scene.generation is params
    assert scene.rebuild_count == 0


def test_unsubscribe(scene, events):
    scene.unsubscribe(events.append)
    scene.on_scale_changed(2.0)
    assert events == []


def test_star_type_changes_tint_only(scene, events):
    mesh = scene.mesh

    tint = scene.on_star_type_changed("K-type")

    assert tint == (1.0, 165 / 255, 0.0)
    assert scene.atmosphere.star_type is StarType.K
    assert scene.uniforms.star_color == tint
    assert scene.uniforms.carbon == 0.5
    assert scene.mesh is mesh
    assert events == ["atmosphere"]

    with pytest.raises(PreconditionViolation):
        scene.on_star_type_changed("X")


def test_atmosphere_toggle_and_uniforms(scene, events):
    assert scene.toggle_atmosphere() is False
    assert scene.uniforms.visible is False
    assert scene.toggle_atmosphere() is True

    uniforms = atmosphere_uniforms(AtmosphereParameters(third_gas="nitrogen", fog_thickness=0.6))
    assert uniforms.third_gas == "nitrogen"
    assert uniforms.fog_thickness == 0.6
    assert uniforms.as_dict()["star_color"] == star_tint(StarType.G)
    assert events == ["atmosphere", "atmosphere"]


def test_water_scale(scene, events):
    scene.on_water_scale_changed(1.2)
    assert scene.settings.water_scale == 1.2
    assert events == ["water"]

    with pytest.raises(PreconditionViolation):
        scene.on_water_scale_changed(0.0)
    assert scene.settings.water_scale == 1.2


def test_set_control_clamps_and_routes(scene, events):
    scene.set_control("octaves", 12)
    assert scene.generation.octaves == 8
    assert isinstance(scene.generation.octaves, int)

    scene.set_control("planet_scale", 5.0)
    assert scene.generation.planet_scale == 2.0

    scene.set_control("carbon", 0.9)
    assert scene.atmosphere.carbon == 0.9

    scene.set_control("rotation_speed", 0.05)
    assert scene.settings.rotation_speed == 0.05

    scene.set_control("water_scale", 1.0)

    assert scene.rebuild_count == 1
    assert events == ["rebuild", "rescale", "atmosphere", "water"]

    with pytest.raises(PreconditionViolation):
        scene.set_control("bogus", 1.0)


def test_nudge_control(scene):
    scene.nudge_control("octaves", 1)
    assert scene.generation.octaves == 6

    scene.nudge_control("frequency", -1)
    assert scene.generation.frequency == pytest.approx(1.5 - 0.09)

    scene.nudge_control("octaves", 10)
    assert scene.generation.octaves == 8


def test_reseed_keeps_noise_kind():
    builder = PlanetMeshBuilder(TerrainSynthesizer(NoiseField(seed=1)))
    scene = PlanetScene(base_sphere=uv_sphere(8, 6), builder=builder)
    before = scene.mesh

    scene.reseed(2)

    noise = scene.builder.synthesizer.noise
    assert isinstance(noise, NoiseField)
    assert noise.seed == 2
    assert scene.rebuild_count == 1
    assert not np.array_equal(scene.mesh.positions, before.positions)


def test_advance_and_model_matrix(scene):
    scene.advance(10)
    assert scene.rotation == pytest.approx(0.1)

    scene.settings.rotation_speed = math.pi
    scene.advance(2)
    assert 0.0 <= scene.rotation < 2.0 * math.pi
    assert scene.rotation == pytest.approx(0.1)

    scene.rotation = 0.0
    scene.on_scale_changed(2.0)
    np.testing.assert_allclose(scene.model_matrix(), np.diag([2.0, 2.0, 2.0, 1.0]))

    scene.rotation = math.pi / 2
    rotated = scene.model_matrix() @ np.array([1.0, 0.0, 0.0, 1.0])
    np.testing.assert_allclose(rotated, (0.0, 0.0, -2.0, 1.0), atol=1e-12)


def test_slider_position(scene):
    assert scene.slider_position("carbon") == pytest.approx(0.5)
    assert scene.slider_position("octaves") == pytest.approx(4 / 7)
    assert scene.slider_position("fog_thickness") == pytest.approx(0.15 / 0.95)

    scene.set_control("amplitude", 50.0)
    assert scene.slider_position("amplitude") == 1.0

    # Values set outside the slider range are pinned to its ends
    scene.on_scale_changed(3.0)
    assert scene.slider_position("planet_scale") == 1.0


def test_inverting_displacement_keeps_previous_mesh(scene, events):
    mesh, params = scene.mesh, scene.generation

    with pytest.raises(PreconditionViolation):
        scene.on_parameters_changed(noise_strength=1000.0)

    assert scene.mesh is mesh
    assert scene.generation is params
    assert events == []
