# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate (WGS84, decimal degrees)."""
    lat: float
    lon: float


# ---------------------------------------------------------------------------
# Transport mode
# ---------------------------------------------------------------------------

class TransportMode(Enum):
    WALKING = "walking"
    JOGGING = "jogging"
    CYCLING = "cycling"

    @property
    def speed_mps(self) -> float:
        """Average speed assumed for this activity, in m/s."""
        return _MODE_SPEEDS_MPS[self]


_MODE_SPEEDS_MPS = {
    TransportMode.WALKING: 1.4,   # ~5 km/h
    TransportMode.JOGGING: 2.8,   # ~10 km/h
    TransportMode.CYCLING: 4.2,   # ~15 km/h
}


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RoutePoint:
    """A single waypoint of a synthesized route."""
    coord: Coord
    aqi: Optional[float] = None
    instruction: Optional[str] = None
    cumulative_distance_m: float = 0.0
    cumulative_time_s: float = 0.0

    def to_dict(self) -> dict:
        return {
            "lat": self.coord.lat,
            "lon": self.coord.lon,
            "aqi": self.aqi,
            "instruction": self.instruction,
            "cumulative_distance_m": self.cumulative_distance_m,
            "cumulative_time_s": self.cumulative_time_s,
        }

    @staticmethod
    def from_dict(d: dict) -> "RoutePoint":
        return RoutePoint(
            coord=Coord(d["lat"], d["lon"]),
            aqi=d.get("aqi"),
            instruction=d.get("instruction"),
            cumulative_distance_m=d.get("cumulative_distance_m", 0.0),
            cumulative_time_s=d.get("cumulative_time_s", 0.0),
        )


@dataclass(frozen=True)
class RouteSegment:
    """Contiguous run of route points sharing one instruction."""
    instruction: str
    points: Tuple[RoutePoint, ...]
    start_index: int
    distance_m: float
    time_s: float
    average_aqi: Optional[float] = None

    @property
    def end_index(self) -> int:
        """Index of the segment's last point in the route (inclusive)."""
        return self.start_index + len(self.points) - 1


@dataclass(frozen=True)
class Route:
    """
    Immutable route shared read-only between the tracker and any renderer.

    Totals mirror the last point's cumulative values.
    """
    points: Tuple[RoutePoint, ...]
    mode: TransportMode
    total_distance_m: float
    total_duration_s: float
    average_aqi: Optional[float]
    segments: Tuple[RouteSegment, ...] = field(default_factory=tuple)

    @property
    def origin(self) -> RoutePoint:
        return self.points[0]

    @property
    def destination(self) -> RoutePoint:
        return self.points[-1]

    def segment_index_of(self, point_index: int) -> int:
        """Index of the segment containing the given point index, or -1."""
        for i, seg in enumerate(self.segments):
            if seg.start_index <= point_index <= seg.end_index:
                return i
        return -1

    def summary(self) -> dict:
        """Human-readable totals, as shown on a route preview card."""
        from .air_quality import aqi_category
        from .geo_utils import format_distance, format_duration

        aqi_text = None
        if self.average_aqi is not None:
            aqi_text = f"{aqi_category(self.average_aqi).value} ({round(self.average_aqi)} AQI)"
        return {
            "distance": format_distance(self.total_distance_m),
            "duration": format_duration(self.total_duration_s),
            "aqi": aqi_text,
            "mode": self.mode.value,
            "segments": len(self.segments),
        }

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "total_distance_m": self.total_distance_m,
            "total_duration_s": self.total_duration_s,
            "average_aqi": self.average_aqi,
            "points": [p.to_dict() for p in self.points],
        }

    @staticmethod
    def from_dict(d: dict) -> "Route":
        """Rebuild a route; segments are recomputed from the point list."""
        from .route_synthesizer import build_segments

        mode = TransportMode(d["mode"])
        points = tuple(RoutePoint.from_dict(p) for p in d["points"])
        return Route(
            points=points,
            mode=mode,
            total_distance_m=d["total_distance_m"],
            total_duration_s=d["total_duration_s"],
            average_aqi=d.get("average_aqi"),
            segments=tuple(build_segments(points, mode)),
        )


# ---------------------------------------------------------------------------
# Live tracking
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PositionFix:
    """One sample from the positioning source."""
    lat: float
    lon: float
    speed_mps: Optional[float] = None
    timestamp: Optional[float] = None   # unix seconds

    @property
    def coord(self) -> Coord:
        return Coord(self.lat, self.lon)


class TrackerPhase(Enum):
    IDLE      = "idle"
    TRACKING  = "tracking"
    COMPLETED = "completed"
    EXITED    = "exited"


@dataclass(frozen=True)
class NavigationState:
    """Returned by NavigationTracker.on_position_update() every GPS update."""
    current_index: int
    progress_pct: float                 # 0-100
    distance_traveled_m: float
    distance_remaining_m: float
    time_remaining_s: float
    current_aqi: Optional[float]
    current_instruction: Optional[str]
    segment_index: int = 0
    next_instruction: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "current_index": self.current_index,
            "progress_pct": round(self.progress_pct, 2),
            "distance_traveled_m": round(self.distance_traveled_m, 1),
            "distance_remaining_m": round(self.distance_remaining_m, 1),
            "time_remaining_s": round(self.time_remaining_s, 1),
            "current_aqi": self.current_aqi,
            "current_instruction": self.current_instruction,
            "segment_index": self.segment_index,
        }


@dataclass(frozen=True)
class SegmentChange:
    """Emitted when the active segment differs from the previous update's."""
    segment_index: int
    instruction: str
    state: NavigationState
