# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules except the data models.

import math
from typing import Sequence

import numpy as np

from .models import Coord, TransportMode


# WGS84 equatorial radius
EARTH_RADIUS_M = 6_378_137.0


def haversine_distance(a: Coord, b: Coord) -> float:
    """
    Great-circle distance between two points in metres.

    The asin argument is clamped to [-1, 1] so nearly identical or antipodal
    points never produce NaN from floating-point overshoot.

    Args:
        a, b: Coordinates in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat))
        * math.cos(math.radians(b.lat))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.asin(clamp(math.sqrt(h), -1.0, 1.0))


def distances_from(position: Coord, coords: Sequence[Coord]) -> np.ndarray:
    """
    Haversine distance from one position to every coordinate in a sequence.

    Same formula as haversine_distance(), vectorised over the sequence.

    Args:
        position: Reference coordinate.
        coords:   Coordinates to measure against.

    Returns:
        Array of distances in metres, one per coordinate, in input order.
    """
    if not coords:
        return np.empty(0, dtype=float)
    lats = np.radians(np.fromiter((c.lat for c in coords), dtype=float, count=len(coords)))
    lons = np.radians(np.fromiter((c.lon for c in coords), dtype=float, count=len(coords)))
    lat0 = math.radians(position.lat)
    lon0 = math.radians(position.lon)
    h = (
        np.sin((lats - lat0) / 2) ** 2
        + math.cos(lat0) * np.cos(lats) * np.sin((lons - lon0) / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * np.arcsin(np.clip(np.sqrt(h), -1.0, 1.0))


def duration_seconds(distance_m: float, mode: TransportMode) -> float:
    """Time needed to cover distance_m at the mode's average speed."""
    return distance_m / mode.speed_mps


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def wrap_longitude(lon: float) -> float:
    """Longitude (or longitude difference) folded into (-180, 180]."""
    if -180.0 < lon <= 180.0:
        return lon
    wrapped = (lon + 180.0) % 360.0 - 180.0
    return 180.0 if wrapped == -180.0 else wrapped


def interpolate(v1: float, v2: float, factor: float) -> float:
    """
    Linear interpolation between v1 and v2.

    Args:
        v1, v2: End values.
        factor: Position between them, clamped to [0, 1].

    Returns:
        v1 + factor * (v2 - v1); exactly v1 when both ends are equal.
    """
    if v1 == v2:
        return v1
    return v1 + clamp(factor, 0.0, 1.0) * (v2 - v1)


def format_distance(meters: float) -> str:
    """Human-readable distance: metres below 1 km, one decimal km above."""
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    """Human-readable duration with minutes rounded up."""
    minutes = math.ceil(seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, remaining = divmod(minutes, 60)
    return f"{hours} h {remaining} min"
