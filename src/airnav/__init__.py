"""Clean-air route synthesis and live navigation tracking."""

from .errors import (
    AirNavError,
    DegenerateRouteError,
    InvalidRouteError,
    ProjectionError,
    RouteGenerationError,
    TrackerStateError,
)
from .models import (
    Coord,
    NavigationState,
    PositionFix,
    Route,
    RoutePoint,
    RouteSegment,
    SegmentChange,
    TrackerPhase,
    TransportMode,
)
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .route_synthesizer import RouteSynthesizer
from .route_tracker import NavigationTracker

__all__ = [
    "AirNavError",
    "Coord",
    "DegenerateRouteError",
    "InvalidRouteError",
    "NavConfig",
    "NavigationState",
    "NavigationSystem",
    "NavigationTracker",
    "PositionFix",
    "ProjectionError",
    "Route",
    "RouteGenerationError",
    "RoutePoint",
    "RouteSegment",
    "RouteSynthesizer",
    "SegmentChange",
    "TrackerPhase",
    "TrackerStateError",
    "TransportMode",
]
