"""
Noise modules for planet generation.

- noise: NoiseSource base class and the OpenSimplex NoiseField
"""

from . import noise

__all__ = ["noise"]
