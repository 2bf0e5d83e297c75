"""
Atmosphere uniform bundle.

Turns AtmosphereParameters into the values the shading stage consumes.
The star tint is computed and passed along, but the atmosphere color mix
only uses the gas fractions.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from ..procgen.params import AtmosphereParameters, StarType, ThirdGas

RGB = Tuple[float, float, float]

STAR_COLORS: Dict[StarType, RGB] = {
    StarType.G: (1.0, 1.0, 0.0),
    StarType.K: (1.0, 165 / 255, 0.0),
    StarType.M: (1.0, 0.0, 0.0),
}

OXYGEN_COLOR: RGB = (0.0, 0.5, 1.0)
CARBON_COLOR: RGB = (1.0, 0.3, 0.3)

THIRD_GAS_COLORS: Dict[ThirdGas, RGB] = {
    ThirdGas.HYDROGEN: (0.8, 0.8, 1.0),
    ThirdGas.NITROGEN: (0.6, 0.7, 1.0),
}

# Atmosphere shell radius relative to the unit planet
SHELL_RADIUS = 1.2


def star_tint(star_type) -> RGB:
    """Tint color for a star type (presentation only)."""
    return STAR_COLORS[StarType.parse(star_type)]


@dataclass(frozen=True)
class AtmosphereUniforms:
    carbon: float
    oxygen: float
    third_gas: str
    third_gas_fraction: float
    third_gas_color: RGB
    star_color: RGB
    fog_thickness: float
    visible: bool

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def atmosphere_uniforms(params: AtmosphereParameters) -> AtmosphereUniforms:
    """Bundle the atmosphere inputs for the shader, unchanged."""

    return AtmosphereUniforms(
        carbon=params.carbon,
        oxygen=params.oxygen,
        third_gas=params.third_gas.value,
        third_gas_fraction=params.third_gas_fraction,
        third_gas_color=THIRD_GAS_COLORS[params.third_gas],
        star_color=star_tint(params.star_type),
        fog_thickness=params.fog_thickness,
        visible=params.visible
    )
