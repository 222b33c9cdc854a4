# route_tracker.py
# State machine that tracks a user's position against an active route.
# start() once, then on_position_update() on every GPS fix (or hand the
# tracker a PositionSource and let it subscribe).
#
# The per-fix arithmetic lives in pure functions (project_onto_route,
# reduce_state) so it can be tested and reused without the state machine.

import logging
import math
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

import numpy as np

from .errors import InvalidRouteError, ProjectionError, TrackerStateError
from .geo_utils import clamp, distances_from, haversine_distance, interpolate
from .instructions import CONTINUE_INSTRUCTION, DESTINATION_INSTRUCTION
from .models import (
    Coord,
    NavigationState,
    PositionFix,
    Route,
    SegmentChange,
    TrackerPhase,
    TransportMode,
)
from .nav_config import NavConfig
from .position_source import PositionSource, Subscription
from .route_synthesizer import build_segments

logger = logging.getLogger(__name__)

SegmentListener = Callable[[SegmentChange], None]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def project_onto_route(
    position: Coord, route: Route, tolerance_m: float = 1e-9
) -> Tuple[int, float]:
    """
    Index of the route point nearest to position, and its distance in metres.

    Points within tolerance_m of the minimum count as ties; the earliest one
    wins so an ambiguous fix never jumps ahead.

    Raises:
        ProjectionError: the route has no points.
    """
    if not route.points:
        raise ProjectionError("Cannot project onto a route with no points.")
    dists = distances_from(position, [p.coord for p in route.points])
    best = dists.min()
    idx = int(np.flatnonzero(dists <= best + tolerance_m)[0])
    return idx, float(dists[idx])


def interpolated_aqi(
    position: Coord, route: Route, index: int, default_aqi: float = 50.0
) -> float:
    """
    AQI at position, blended between route point `index` and the next one.

    The blend factor is d1 / (d1 + d2), the share of the distance to the
    nearer point. At the last point, or when both distances are zero, the
    point's own AQI is used.
    """
    points = route.points
    aqi_here = points[index].aqi if points[index].aqi is not None else default_aqi
    if index >= len(points) - 1:
        return aqi_here

    nxt = points[index + 1]
    aqi_next = nxt.aqi if nxt.aqi is not None else default_aqi
    d1 = haversine_distance(position, points[index].coord)
    d2 = haversine_distance(position, nxt.coord)
    if d1 + d2 == 0:
        return aqi_here
    return interpolate(aqi_here, aqi_next, d1 / (d1 + d2))


def next_instruction(route: Route, index: int) -> str:
    """First instruction strictly ahead of index."""
    if index >= len(route.points) - 1:
        return DESTINATION_INSTRUCTION
    for point in route.points[index + 1:]:
        if point.instruction:
            return point.instruction
    return CONTINUE_INSTRUCTION


def _segment_instruction(route: Route, index: int) -> Tuple[int, Optional[str]]:
    seg_idx = route.segment_index_of(index)
    if seg_idx < 0:
        return seg_idx, route.points[index].instruction
    return seg_idx, route.segments[seg_idx].instruction


def _validated(fix: PositionFix) -> Tuple[Coord, Optional[float]]:
    """Coordinates and speed of a fix, or ValueError/TypeError if unusable."""
    lat = float(fix.lat)
    lon = float(fix.lon)
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"non-finite coordinates ({lat}, {lon})")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise ValueError(f"coordinates out of range ({lat}, {lon})")
    speed = getattr(fix, "speed_mps", None)
    if speed is not None:
        speed = float(speed)
        if not math.isfinite(speed):
            raise ValueError(f"non-finite speed {speed}")
    return Coord(lat, lon), speed


def initial_state(route: Route, mode: TransportMode) -> NavigationState:
    """State before the first fix: at the origin, nothing travelled."""
    seg_idx, instruction = _segment_instruction(route, 0)
    first_aqi = route.points[0].aqi
    return NavigationState(
        current_index=0,
        progress_pct=0.0,
        distance_traveled_m=0.0,
        distance_remaining_m=route.total_distance_m,
        time_remaining_s=route.total_distance_m / mode.speed_mps,
        current_aqi=first_aqi,
        current_instruction=instruction,
        segment_index=seg_idx,
        next_instruction=next_instruction(route, 0),
    )


def reduce_state(
    state: NavigationState,
    fix: PositionFix,
    route: Route,
    mode: TransportMode,
    config: Optional[NavConfig] = None,
) -> NavigationState:
    """
    Next navigation state for one position fix.

    Pure: neither the previous state nor the route is modified. Once the
    previous state sits on the final point it is returned unchanged.

    Raises:
        ValueError, TypeError: the fix is malformed.
    """
    config = config or NavConfig()
    last = len(route.points) - 1
    if state.current_index >= last:
        return state

    position, speed = _validated(fix)
    idx, _ = project_onto_route(position, route, config.tie_tolerance_m)

    progress_pct = clamp(idx / last, 0.0, 1.0) * 100
    traveled = route.total_distance_m * progress_pct / 100
    remaining = route.total_distance_m - traveled
    effective_speed = speed if speed is not None and speed > 0 else mode.speed_mps

    seg_idx, instruction = _segment_instruction(route, idx)
    return replace(
        state,
        current_index=idx,
        progress_pct=progress_pct,
        distance_traveled_m=traveled,
        distance_remaining_m=remaining,
        time_remaining_s=remaining / effective_speed,
        current_aqi=interpolated_aqi(position, route, idx, config.default_aqi),
        current_instruction=instruction,
        segment_index=seg_idx,
        next_instruction=next_instruction(route, idx),
    )


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

class NavigationTracker:
    """
    Stateful progress tracker for a single navigation session.

    Phases: IDLE -> TRACKING -> COMPLETED (final point reached) or
    EXITED (stop()). Single writer: callers must serialise updates.

    Usage:
        tracker = NavigationTracker(route, on_segment_change=show_instruction)
        tracker.start(position_source)

        # Or, feeding fixes by hand:
        state = tracker.on_position_update(fix)

    Args:
        route:             Route produced by RouteSynthesizer.
        mode:              Transport mode for speed fallback; route.mode if omitted.
        config:            NavConfig instance.
        on_segment_change: Called when the active segment changes.

    Raises:
        InvalidRouteError: the route has fewer than two points.
    """

    def __init__(
        self,
        route: Route,
        mode: Optional[TransportMode] = None,
        config: Optional[NavConfig] = None,
        on_segment_change: Optional[SegmentListener] = None,
    ) -> None:
        if route is None or len(route.points) < 2:
            count = 0 if route is None else len(route.points)
            raise InvalidRouteError(f"Route needs at least 2 points, got {count}.")
        if not route.segments:
            route = replace(route, segments=tuple(build_segments(route.points, route.mode)))

        self.config = config or NavConfig()
        self._route = route
        self._mode = mode or route.mode
        self._listeners: List[SegmentListener] = []
        if on_segment_change is not None:
            self._listeners.append(on_segment_change)

        self._phase = TrackerPhase.IDLE
        self._state: Optional[NavigationState] = None
        self._last_segment: Optional[int] = None
        self._subscription: Optional[Subscription] = None

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def phase(self) -> TrackerPhase:
        return self._phase

    @property
    def state(self) -> Optional[NavigationState]:
        """Last emitted state; kept after completion or stop."""
        return self._state

    @property
    def route(self) -> Route:
        return self._route

    @property
    def mode(self) -> TransportMode:
        return self._mode

    @property
    def is_active(self) -> bool:
        return self._phase is TrackerPhase.TRACKING

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def add_listener(self, listener: SegmentListener) -> None:
        self._listeners.append(listener)

    def start(self, source: Optional[PositionSource] = None) -> NavigationState:
        """
        Begin tracking; subscribes to source when one is given.

        Returns:
            The initial state (origin, zero progress).

        Raises:
            TrackerStateError: the tracker was already started.
        """
        if self._phase is not TrackerPhase.IDLE:
            raise TrackerStateError(f"Cannot start a tracker in phase '{self._phase.value}'.")

        try:
            self._state = initial_state(self._route, self._mode)
            self._phase = TrackerPhase.TRACKING
            self._emit_if_changed(self._state)
            if source is not None:
                self._subscription = source.subscribe(self._on_fix)
        except Exception:
            self._teardown(TrackerPhase.EXITED)
            raise

        logger.info(
            f"Tracking started: {len(self._route.points)} points, "
            f"{self._route.total_distance_m:.0f} m, mode={self._mode.value}."
        )
        return self._state

    def stop(self) -> None:
        """End navigation and release the position subscription."""
        if self._phase is TrackerPhase.COMPLETED:
            self._teardown(TrackerPhase.COMPLETED)
            return
        if self._phase is not TrackerPhase.EXITED:
            logger.info("Navigation stopped.")
        self._teardown(TrackerPhase.EXITED)

    def __enter__(self) -> "NavigationTracker":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False

    # ------------------------------------------------------------------
    # Core method: call on every GPS update
    # ------------------------------------------------------------------

    def on_position_update(self, fix: PositionFix) -> NavigationState:
        """
        Project a new fix onto the route and return the updated state.

        A malformed fix is logged and the previous state returned unchanged.
        After completion every call returns the final state.

        Raises:
            TrackerStateError: the tracker is idle or has been stopped.
        """
        if self._phase is TrackerPhase.COMPLETED:
            return self._state
        if self._phase is not TrackerPhase.TRACKING:
            raise TrackerStateError(
                f"Position update rejected: tracker is '{self._phase.value}'."
            )

        try:
            new_state = reduce_state(self._state, fix, self._route, self._mode, self.config)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring malformed position fix {fix!r}: {e}")
            return self._state

        self._state = new_state
        logger.debug(
            f"Fix -> index {new_state.current_index}, "
            f"{new_state.progress_pct:.1f}%, AQI {new_state.current_aqi}"
        )
        self._emit_if_changed(new_state)

        if new_state.current_index == len(self._route.points) - 1:
            logger.info("Destination reached. Tracking completed.")
            self._teardown(TrackerPhase.COMPLETED)

        return new_state

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_fix(self, fix: PositionFix) -> None:
        self.on_position_update(fix)

    def _emit_if_changed(self, state: NavigationState) -> None:
        if state.segment_index == self._last_segment:
            return
        self._last_segment = state.segment_index
        event = SegmentChange(
            segment_index=state.segment_index,
            instruction=state.current_instruction or "",
            state=state,
        )
        logger.info(f"Segment {event.segment_index}: {event.instruction}")
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Segment listener failed.")

    def _teardown(self, phase: TrackerPhase) -> None:
        self._phase = phase
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if phase is TrackerPhase.EXITED:
            self._listeners.clear()
