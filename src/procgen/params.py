"""
Parameter value objects for planet generation.

- GenerationParameters: everything that shapes or colors the terrain
- AtmosphereParameters: inputs of the atmosphere shading stage
- StarType / ThirdGas: enumerations accepted by the atmosphere stage

All of them are frozen snapshots. Hosts keep the mutable "current settings"
and build a fresh snapshot per change with ``replace``.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace as _replace
from enum import Enum
from numbers import Integral
from typing import Any, Dict, Tuple


class PreconditionViolation(ValueError):
    """Raised when an input would produce NaN or garbage geometry."""


def _check_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise PreconditionViolation(f"{name} must be finite, got {value!r}")


def _check_positive(name: str, value: float) -> None:
    _check_finite(name, value)
    if value <= 0:
        raise PreconditionViolation(f"{name} must be > 0, got {value!r}")


def _check_fraction(name: str, value: float) -> None:
    _check_finite(name, value)
    if not 0.0 <= value <= 1.0:
        raise PreconditionViolation(f"{name} must be in [0, 1], got {value!r}")


@dataclass(frozen=True)
class GenerationParameters:
    """
    Snapshot of the terrain generation settings.

    ``planet_scale`` travels with the snapshot but never enters synthesis;
    hosts apply it as a model transform.
    """

    noise_strength: float = 0.05
    frequency: float = 1.5
    amplitude: float = 5.0
    octaves: int = 5
    persistence: float = 0.5
    flatland_threshold: float = 0.1
    plateau_height: float = 1.5
    planet_scale: float = 1.0

    def __post_init__(self):
        if isinstance(self.octaves, bool) or not isinstance(self.octaves, Integral):
            raise PreconditionViolation(f"octaves must be an integer, got {self.octaves!r}")
        if self.octaves < 1:
            raise PreconditionViolation(f"octaves must be >= 1, got {self.octaves}")

        _check_positive("amplitude", self.amplitude)
        _check_positive("frequency", self.frequency)
        _check_positive("noise_strength", self.noise_strength)
        _check_positive("planet_scale", self.planet_scale)

        _check_finite("persistence", self.persistence)
        if not 0.0 < self.persistence <= 1.0:
            raise PreconditionViolation(
                f"persistence must be in (0, 1], got {self.persistence!r}"
            )

        # A flatland threshold above the plateau is allowed; shaping resolves it
        _check_finite("flatland_threshold", self.flatland_threshold)
        _check_finite("plateau_height", self.plateau_height)

    @property
    def is_degenerate(self) -> bool:
        """True when the flatland and plateau bands overlap."""
        return self.flatland_threshold > self.plateau_height

    @property
    def displacement_factor(self) -> float:
        """Radial displacement per unit of elevation."""
        return self.noise_strength / 10.0

    def replace(self, **changes: Any) -> "GenerationParameters":
        return _replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class StarType(Enum):
    G = "G-type"
    K = "K-type"
    M = "M-type"

    @classmethod
    def parse(cls, value: Any) -> "StarType":
        """Accept a StarType, a member name ("K") or a label ("K-type")."""

        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.upper() == member.name or text.lower() == member.value.lower():
                return member
        raise PreconditionViolation(f"Unknown star type: {value!r}")


class ThirdGas(Enum):
    HYDROGEN = "hydrogen"
    NITROGEN = "nitrogen"


@dataclass(frozen=True)
class AtmosphereParameters:
    """Inputs of the atmosphere shading stage. Never used by mesh synthesis."""

    carbon: float = 0.5
    oxygen: float = 0.3
    third_gas_fraction: float = 0.2
    third_gas: ThirdGas = ThirdGas.HYDROGEN
    star_type: StarType = StarType.G
    fog_thickness: float = 0.2
    visible: bool = True

    def __post_init__(self):
        _check_fraction("carbon", self.carbon)
        _check_fraction("oxygen", self.oxygen)
        _check_fraction("third_gas_fraction", self.third_gas_fraction)
        _check_positive("fog_thickness", self.fog_thickness)
        if not isinstance(self.star_type, StarType):
            object.__setattr__(self, "star_type", StarType.parse(self.star_type))
        if not isinstance(self.third_gas, ThirdGas):
            try:
                object.__setattr__(self, "third_gas", ThirdGas(str(self.third_gas).lower()))
            except ValueError as e:
                raise PreconditionViolation(f"Unknown third gas: {self.third_gas!r}") from e

    def replace(self, **changes: Any) -> "AtmosphereParameters":
        return _replace(self, **changes)


@dataclass
class SceneSettings:
    """Presentation-only settings owned and mutated by the host."""

    rotation_speed: float = 0.01
    water_scale: float = 0.5
    light_position: Tuple[float, float, float] = field(default=(10.0, 10.0, 10.0))
