"""
Terrain synthesis: sphere direction -> elevation.
"""

from typing import Optional, Sequence

import numpy as np

from .modules.noise import NoiseField, NoiseSource, as_points
from .params import GenerationParameters


def shape_elevation(noise: float, flatland_threshold: float, plateau_height: float) -> float:
    """
    Apply the flatland / plateau shaping to one raw noise sum.

    The flatland test runs first, so when the threshold sits above the
    plateau the values between them are halved, not clamped.
    """

    if noise < flatland_threshold:
        return noise * 0.5
    elif noise > plateau_height:
        return plateau_height
    return noise


def shape_elevations(noise: np.ndarray, flatland_threshold: float, plateau_height: float) -> np.ndarray:
    """Vectorized shape_elevation with the same branch order."""

    noise = np.asarray(noise, dtype=np.float64)
    return np.where(
        noise < flatland_threshold,
        noise * 0.5,
        np.where(noise > plateau_height, plateau_height, noise)
    )


class TerrainSynthesizer:
    """
    Turns unit-sphere directions into elevations.

    Elevation is a fractal Brownian motion sum of the noise source followed
    by shaping:
    - low terrain (below flatland_threshold) is halved toward sea level
    - peaks above plateau_height are cut flat
    """

    def __init__(self, noise: Optional[NoiseSource] = None):
        self.noise = noise if noise is not None else NoiseField()

    def evaluate(self, direction: Sequence[float], params: GenerationParameters) -> float:
        """
        Elevation for one direction.

        Args:
            direction: Unit 3-vector on the base sphere
            params: Generation parameters snapshot

        Returns:
            Shaped elevation
        """

        x, y, z = (float(c) for c in direction)
        noise = 0.0
        amp = params.amplitude
        freq = params.frequency

        for _ in range(params.octaves):
            noise += amp * self.noise.sample3d(x * freq, y * freq, z * freq)
            amp *= params.persistence
            freq *= 2.0

        return shape_elevation(noise, params.flatland_threshold, params.plateau_height)

    def evaluate_many(self, directions, params: GenerationParameters) -> np.ndarray:
        """Elevations for an (N, 3) array of unit directions."""

        directions = as_points(directions)
        noise = self.noise.fractal_sum(
            directions,
            params.frequency,
            params.amplitude,
            params.persistence,
            params.octaves
        )
        return shape_elevations(noise, params.flatland_threshold, params.plateau_height)
