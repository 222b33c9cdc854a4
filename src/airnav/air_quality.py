# air_quality.py
# Air-quality lookups used while synthesizing a route, and AQI classification.
#
# RouteSynthesizer only talks to the AirQualityProvider protocol, so the
# synthetic profile can be swapped for a real geo-indexed source.
#
# Usage:
#   provider = StationAirQualityProvider(readings, radius_m=5000)
#   synthesizer = RouteSynthesizer(air_quality=provider)

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol

import numpy as np

from .geo_utils import clamp, distances_from
from .models import Coord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Provider seam
# ---------------------------------------------------------------------------

class AirQualityProvider(Protocol):
    def aqi_at(self, coord: Coord, progress: float) -> float:
        """AQI at coord; progress is the point's position along the route in [0, 1]."""
        ...


class SyntheticAirQualityProvider:
    """
    Placeholder AQI profile: higher mid-route, lower near both ends.

    Origin and destination get fixed values; interior points follow
    base + amplitude * sin(pi * progress) plus uniform noise, clamped to
    [floor, ceiling]. This is not a real air-quality sample.

    Args:
        rng: Seedable random source for the noise term.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        base: float = 30.0,
        amplitude: float = 20.0,
        noise: float = 5.0,
        floor: float = 20.0,
        ceiling: float = 80.0,
        origin_aqi: float = 35.0,
        destination_aqi: float = 28.0,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.base = base
        self.amplitude = amplitude
        self.noise = noise
        self.floor = floor
        self.ceiling = ceiling
        self.origin_aqi = origin_aqi
        self.destination_aqi = destination_aqi

    def aqi_at(self, coord: Coord, progress: float) -> float:
        if progress <= 0.0:
            return self.origin_aqi
        if progress >= 1.0:
            return self.destination_aqi
        variation = math.sin(progress * math.pi) * self.amplitude
        jitter = self.rng.uniform(-self.noise, self.noise)
        return clamp(self.base + variation + jitter, self.floor, self.ceiling)


# ---------------------------------------------------------------------------
# Station readings
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StationReading:
    """Latest AQI reported by a monitoring station."""
    name: str
    coord: Coord
    aqi: float


class StationAirQualityProvider:
    """
    Nearest-station lookup over a fixed set of readings.

    Args:
        readings:    Station readings to search.
        radius_m:    Ignore stations farther than this (None = unlimited).
        default_aqi: Returned when no station qualifies.
    """

    def __init__(
        self,
        readings: Iterable[StationReading],
        radius_m: Optional[float] = None,
        default_aqi: float = 50.0,
    ) -> None:
        self.readings = list(readings)
        self.radius_m = radius_m
        self.default_aqi = default_aqi
        logger.info(f"Station provider loaded with {len(self.readings)} readings.")

    def nearest(self, coord: Coord) -> Optional[StationReading]:
        if not self.readings:
            return None
        dists = distances_from(coord, [r.coord for r in self.readings])
        idx = int(np.argmin(dists))
        if self.radius_m is not None and dists[idx] > self.radius_m:
            return None
        return self.readings[idx]

    def aqi_at(self, coord: Coord, progress: float) -> float:
        station = self.nearest(coord)
        if station is None:
            logger.debug(f"No station near {coord}; using default AQI {self.default_aqi}.")
            return self.default_aqi
        return station.aqi


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class AqiCategory(Enum):
    GOOD                   = "Good"
    MODERATE               = "Moderate"
    UNHEALTHY_SENSITIVE    = "Unhealthy for Sensitive Groups"
    UNHEALTHY              = "Unhealthy"
    VERY_UNHEALTHY         = "Very Unhealthy"
    HAZARDOUS              = "Hazardous"


# Upper bound (inclusive), category, display colour, health implications.
# The last band is open-ended.
_CATEGORY_BANDS = (
    (50, AqiCategory.GOOD, "#4CAF50",
     "Air quality is satisfactory, and air pollution poses little or no risk."),
    (100, AqiCategory.MODERATE, "#FFEB3B",
     "Air quality is acceptable. However, there may be a risk for some people, "
     "particularly those who are unusually sensitive to air pollution."),
    (150, AqiCategory.UNHEALTHY_SENSITIVE, "#FF9800",
     "Members of sensitive groups may experience health effects. "
     "The general public is less likely to be affected."),
    (200, AqiCategory.UNHEALTHY, "#F44336",
     "Some members of the general public may experience health effects; "
     "members of sensitive groups may experience more serious health effects."),
    (300, AqiCategory.VERY_UNHEALTHY, "#9C27B0",
     "Health alert: The risk of health effects is increased for everyone."),
    (math.inf, AqiCategory.HAZARDOUS, "#7D0023",
     "Health warning of emergency conditions: everyone is more likely to be affected."),
)


def _band(aqi: float) -> tuple:
    for band in _CATEGORY_BANDS:
        if aqi <= band[0]:
            return band
    return _CATEGORY_BANDS[-1]


def aqi_category(aqi: float) -> AqiCategory:
    return _band(aqi)[1]


def aqi_color(aqi: float) -> str:
    return _band(aqi)[2]


def aqi_health_implications(aqi: float) -> str:
    """Health advice for the category aqi falls in."""
    return _band(aqi)[3]


def aqi_description(aqi: float) -> str:
    """Short label such as 'Moderate (72)'."""
    return f"{aqi_category(aqi).value} ({round(aqi)})"


def exceeds_threshold(aqi: float, threshold: float) -> bool:
    return aqi > threshold
