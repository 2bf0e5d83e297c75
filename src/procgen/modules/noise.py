"""
Noise sources for terrain generation.

- NoiseSource: base class; vectorized sampling and fractal summation
- NoiseField: OpenSimplex 3D noise with a fixed seed (default backend)

Every source is a pure function of its input coordinates once constructed.
"""

from abc import ABC, abstractmethod

import numpy as np
from opensimplex import OpenSimplex


DEFAULT_SEED = 1337


def as_points(points) -> np.ndarray:
    """Coerce input to a float64 array of shape (N, 3)."""

    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1 and points.shape[0] == 3:
        points = points[None, :]
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected points of shape (N, 3), got {points.shape}")
    return points


class NoiseSource(ABC):
    """Base class for all coherent noise functions."""

    @abstractmethod
    def sample3d(self, x: float, y: float, z: float) -> float:
        """Noise value at one point, approximately in [-1, 1]."""
        pass

    def sample_many(self, points) -> np.ndarray:
        """Noise values for an (N, 3) array of points."""

        points = as_points(points)
        return np.fromiter(
            (self.sample3d(x, y, z) for x, y, z in points),
            dtype=np.float64,
            count=points.shape[0]
        )

    def fractal_sum(
        self,
        points,
        frequency: float,
        amplitude: float,
        persistence: float,
        octaves: int
    ) -> np.ndarray:
        """
        Multi-octave summation over many points.

        Args:
            points: (N, 3) sample directions
            frequency: Frequency of the first octave; doubled per octave
            amplitude: Amplitude of the first octave
            persistence: Amplitude multiplier per octave
            octaves: Number of octaves to sum

        Returns:
            Raw (unshaped) noise sums of shape (N,)
        """

        points = as_points(points)
        total = np.zeros(points.shape[0], dtype=np.float64)
        amp = amplitude
        freq = frequency

        for _ in range(octaves):
            total += amp * self.sample_many(points * freq)
            amp *= persistence
            freq *= 2.0

        return total


class NoiseField(NoiseSource):
    """
    OpenSimplex gradient noise over R^3.

    The permutation tables are fixed at construction, so a field is
    seed-stable for the whole session.
    """

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed = seed
        self._simplex = OpenSimplex(seed=seed)

    def sample3d(self, x: float, y: float, z: float) -> float:
        return float(self._simplex.noise3(x, y, z))

    def __repr__(self) -> str:
        return f"NoiseField(seed={self.seed})"
