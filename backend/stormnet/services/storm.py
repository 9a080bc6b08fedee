"""Storm state and its per-tick evolution.

Wind speed, pressure, rainfall, surge and category are pure functions of
intensity and are only ever written by ``_derive``.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from stormnet.zones.definitions import MAX_STORM_DISTANCE, Zone

logger = logging.getLogger(__name__)

# Max per-tick intensity drift either way
INTENSITY_DRIFT = 0.015
# Drift beyond this marks the storm strengthening/weakening
TREND_THRESHOLD = 0.01

# Saffir-Simpson style upper bounds (mph), checked in order
_CATEGORY_THRESHOLDS = (
    (39, "Tropical Depression"),
    (74, "Tropical Storm"),
    (96, "Category 1 Hurricane"),
    (111, "Category 2 Hurricane"),
    (130, "Category 3 Hurricane"),
    (157, "Category 4 Hurricane"),
)

TREND_LABELS = {1: "Strengthening", -1: "Weakening", 0: "Steady"}


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def categorize(wind_speed_mph: float) -> str:
    for upper, label in _CATEGORY_THRESHOLDS:
        if wind_speed_mph < upper:
            return label
    return "Category 5 Hurricane"


@dataclass
class StormState:
    intensity: float = 0.5
    movement_speed: float = 15.0  # mph
    direction: float = 180.0  # degrees
    eye_radius: float = 10.0  # miles
    trend: int = 0
    time: int = 0
    wind_speed: float = field(init=False)
    pressure: float = field(init=False)
    rainfall: float = field(init=False)
    storm_surge: float = field(init=False)
    category: str = field(init=False)

    def __post_init__(self):
        self.intensity = clamp(self.intensity, 0.0, 1.0)
        self._derive()

    def _derive(self):
        i = self.intensity
        self.wind_speed = 30 + i * 150
        self.pressure = 1010 - i * 100
        self.rainfall = 1 + i * 15
        self.storm_surge = i * 25
        self.category = categorize(self.wind_speed)

    def advance(self, zones, rng: np.random.Generator) -> float:
        """Move the storm forward one tick and shift every zone's distance.

        Returns the intensity delta drawn for this tick.
        """
        self.time += 1

        delta = float(rng.uniform(-INTENSITY_DRIFT, INTENSITY_DRIFT))
        self.intensity = clamp(self.intensity + delta, 0.0, 1.0)
        self._derive()

        if delta > TREND_THRESHOLD:
            self.trend = 1
        elif delta < -TREND_THRESHOLD:
            self.trend = -1
        else:
            self.trend = 0

        for zone in zones:
            self._move_relative_to(zone, rng)

        return delta

    def _move_relative_to(self, zone: Zone, rng: np.random.Generator):
        # Zone bearing is re-drawn every tick: tracking is imprecise, not geometric
        movement = self.movement_speed / 60
        bearing = float(rng.random()) * 360
        approach = movement * math.cos(math.radians(bearing - self.direction))
        noise = float(rng.random()) - 0.5
        zone.distance_to_storm = clamp(
            zone.distance_to_storm - approach + noise, 0.0, MAX_STORM_DISTANCE,
        )

    def set_intensity(self, value: float):
        """Discontinuous override: jump to ``value`` and restart the storm clock."""
        self.intensity = clamp(value, 0.0, 1.0)
        self._derive()
        self.trend = 0
        self.time = 0
        logger.info(
            "Storm intensity set to %.2f (%s, %.0f mph)",
            self.intensity, self.category, self.wind_speed,
        )

    @property
    def trend_label(self) -> str:
        return TREND_LABELS[self.trend]
