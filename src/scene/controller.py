"""
Host-side scene controller.

PlanetScene owns the mutable "current settings" of an interactive session
and turns control signals into snapshots, rebuilds and transforms:

- on_parameters_changed: full rebuild from a new GenerationParameters
- on_scale_changed: uniform model scale, no resynthesis
- on_star_type_changed / on_atmosphere_changed: new uniform bundle
- on_water_scale_changed: water shell scale

Listeners receive one of "rebuild", "rescale", "atmosphere", "water".
"""

import math
from typing import Any, Callable, List, Optional

import numpy as np

from ..engine.mesh_builder import PlanetMesh, PlanetMeshBuilder
from ..engine.sphere import BaseSphere, uv_sphere
from ..procgen.core import TerrainSynthesizer
from ..procgen.grammar import ControlRegistry, default_registry
from ..procgen.params import (
    AtmosphereParameters,
    GenerationParameters,
    PreconditionViolation,
    SceneSettings,
    StarType,
)
from .atmosphere import AtmosphereUniforms, atmosphere_uniforms, star_tint

Listener = Callable[[str], None]


class PlanetScene:
    """
    Interactive planet session.

    Holds the base sphere, the builder and the newest mesh. A rebuild
    replaces the mesh only once it has completed, so a failing build leaves
    the previous planet in place.
    """

    def __init__(
        self,
        base_sphere: Optional[BaseSphere] = None,
        builder: Optional[PlanetMeshBuilder] = None,
        generation: Optional[GenerationParameters] = None,
        atmosphere: Optional[AtmosphereParameters] = None,
        settings: Optional[SceneSettings] = None,
        registry: Optional[ControlRegistry] = None
    ):
        self.base_sphere = base_sphere if base_sphere is not None else uv_sphere()
        self.builder = builder if builder is not None else PlanetMeshBuilder()
        self.generation = generation if generation is not None else GenerationParameters()
        self.atmosphere = atmosphere if atmosphere is not None else AtmosphereParameters()
        self.settings = settings if settings is not None else SceneSettings()
        self.registry = registry if registry is not None else default_registry()

        self.rotation = 0.0
        self.rebuild_count = 0
        self._listeners: List[Listener] = []

        self.mesh: PlanetMesh = self.builder.build(self.base_sphere, self.generation)

    # Listeners

    def subscribe(self, callback: Listener):
        self._listeners.append(callback)

    def unsubscribe(self, callback: Listener):
        self._listeners.remove(callback)

    def _notify(self, event: str):
        for callback in list(self._listeners):
            callback(event)

    # Control signals

    def on_parameters_changed(self, **changes: Any) -> PlanetMesh:
        """
        Rebuild the planet from the current settings plus changes.

        A change that only touches planet_scale takes the rescale path.

        Raises:
            PreconditionViolation: If the new snapshot is invalid; nothing changes
        """

        params = self.generation.replace(**changes)

        if changes and set(changes) == {"planet_scale"}:
            self.on_scale_changed(params.planet_scale)
            return self.mesh

        mesh = self.builder.build(self.base_sphere, params)

        self.generation = params
        self.mesh = mesh
        self.rebuild_count += 1
        self._notify("rebuild")
        return mesh

    def on_scale_changed(self, planet_scale: float):
        """Apply a new uniform planet scale without resynthesis."""

        self.generation = self.generation.replace(planet_scale=planet_scale)
        self._notify("rescale")

    def on_star_type_changed(self, star_type) -> tuple:
        """Switch star type; returns the new tint color."""

        self.atmosphere = self.atmosphere.replace(star_type=StarType.parse(star_type))
        self._notify("atmosphere")
        return star_tint(self.atmosphere.star_type)

    def on_atmosphere_changed(self, **changes: Any):
        self.atmosphere = self.atmosphere.replace(**changes)
        self._notify("atmosphere")

    def toggle_atmosphere(self) -> bool:
        self.on_atmosphere_changed(visible=not self.atmosphere.visible)
        return self.atmosphere.visible

    def on_water_scale_changed(self, water_scale: float):
        if not water_scale > 0:
            raise PreconditionViolation(f"water_scale must be > 0, got {water_scale!r}")
        self.settings.water_scale = float(water_scale)
        self._notify("water")

    def reseed(self, seed: int) -> PlanetMesh:
        """Rebuild with a noise source of the same kind and a new seed."""

        noise_cls = type(self.builder.synthesizer.noise)
        self.builder = PlanetMeshBuilder(
            TerrainSynthesizer(noise_cls(seed=seed)),
            self.builder.classifier
        )
        return self.on_parameters_changed()

    # Slider entry points

    def set_control(self, name: str, value: float):
        """Clamp a slider value and route it to the signal that owns it."""

        spec = self.registry.get(name)
        if spec is None:
            raise PreconditionViolation(f"Unknown control: {name!r}")

        value = spec.clamp(name, value)
        group = self.registry.group_of(name)

        if group == "generation":
            if name == "planet_scale":
                self.on_scale_changed(value)
            else:
                self.on_parameters_changed(**{name: value})
        elif group == "atmosphere":
            self.on_atmosphere_changed(**{name: value})
        elif name == "water_scale":
            self.on_water_scale_changed(value)
        else:
            setattr(self.settings, name, value)

    def control_value(self, name: str) -> float:
        group = self.registry.group_of(name)
        if group == "generation":
            return getattr(self.generation, name)
        elif group == "atmosphere":
            return getattr(self.atmosphere, name)
        return getattr(self.settings, name)

    def slider_position(self, name: str) -> float:
        """Current value of a control as a [0, 1] position along its slider."""

        spec = self.registry.spec_for(name)
        position = spec.normalize_params({name: self.control_value(name)})[name]
        return min(1.0, max(0.0, position))

    def nudge_control(self, name: str, steps: int):
        """Move a control by whole slider steps."""

        spec = self.registry.spec_for(name)
        self.set_control(name, self.control_value(name) + steps * spec.step(name))

    # Per-frame state

    def advance(self, frames: int = 1):
        """Spin the planet and atmosphere by rotation_speed per frame."""
        self.rotation = (self.rotation + self.settings.rotation_speed * frames) % (2.0 * math.pi)

    def scaled_positions(self) -> np.ndarray:
        """Mesh positions with the planet scale applied."""
        return self.mesh.positions * self.generation.planet_scale

    def model_matrix(self) -> np.ndarray:
        """4x4 model transform: rotation about +Y, then uniform scale."""

        s = self.generation.planet_scale
        c, n = math.cos(self.rotation), math.sin(self.rotation)
        return np.array([
            [c * s, 0.0, n * s, 0.0],
            [0.0, s, 0.0, 0.0],
            [-n * s, 0.0, c * s, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ])

    @property
    def uniforms(self) -> AtmosphereUniforms:
        return atmosphere_uniforms(self.atmosphere)
