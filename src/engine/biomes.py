"""
Biome classification.

Maps post-displacement elevation to a fixed, ordered set of color bands.
"""

from enum import IntEnum
from typing import Tuple

import numpy as np


class Biome(IntEnum):
    """Biome bands ordered from lowest to highest elevation."""

    DESERT = 0
    PLAINS = 1
    FOREST = 2
    TUNDRA = 3
    SNOW = 4

    @property
    def color(self) -> Tuple[float, float, float]:
        return BIOME_COLORS[self]


# Plains and forest share one color
BIOME_COLORS = {
    Biome.DESERT: (0.86, 0.75, 0.49),
    Biome.PLAINS: (0.18, 0.55, 0.20),
    Biome.FOREST: (0.18, 0.55, 0.20),
    Biome.TUNDRA: (0.55, 0.58, 0.55),
    Biome.SNOW: (1.0, 1.0, 1.0),
}

# Upper bounds (exclusive) of every band but the last
BIOME_THRESHOLDS = (0.001, 0.004, 0.015, 0.02)


class BiomeClassifier:
    """
    Elevation to biome lookup.

    | elevation | biome  |
    |-----------|--------|
    | < 0.001   | desert |
    | < 0.004   | plains |
    | < 0.015   | forest |
    | < 0.02    | tundra |
    | >= 0.02   | snow   |
    """

    def __init__(self):
        self._thresholds = np.array(BIOME_THRESHOLDS, dtype=np.float64)
        self._palette = np.array([BIOME_COLORS[b] for b in Biome], dtype=np.float32)

    def classify(self, elevation: float) -> Biome:
        for biome, upper in zip(Biome, BIOME_THRESHOLDS):
            if elevation < upper:
                return biome
        return Biome.SNOW

    def classify_many(self, elevations) -> np.ndarray:
        """Biome indices (uint8) for an array of elevations."""

        elevations = np.asarray(elevations, dtype=np.float64)
        # side="right" keeps each threshold in the band above it; NaN sorts last
        return np.searchsorted(self._thresholds, elevations, side="right").astype(np.uint8)

    def colors_for(self, biomes) -> np.ndarray:
        """RGB rows (float32 in [0, 1]) for an array of biome indices."""
        return self._palette[np.asarray(biomes, dtype=np.intp)]

    def color(self, elevation: float) -> Tuple[float, float, float]:
        return self.classify(elevation).color
