"""
Scene assembly boundary.

PlanetScene receives control signals from a host (viewer, script) and keeps
the newest mesh, transforms and atmosphere uniforms.
"""

from .atmosphere import (
    SHELL_RADIUS,
    STAR_COLORS,
    AtmosphereUniforms,
    atmosphere_uniforms,
    star_tint,
)
from .controller import PlanetScene

__all__ = [
    "PlanetScene",
    "AtmosphereUniforms",
    "atmosphere_uniforms",
    "star_tint",
    "STAR_COLORS",
    "SHELL_RADIUS",
]
