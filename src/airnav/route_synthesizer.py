# route_synthesizer.py
# Builds an AQI-annotated waypoint route between two coordinates.
# Returns an immutable Route with instructions and segments.

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from .air_quality import AirQualityProvider, SyntheticAirQualityProvider
from .errors import DegenerateRouteError, RouteGenerationError
from .geo_utils import duration_seconds, haversine_distance, wrap_longitude
from .instructions import (
    CONTINUE_INSTRUCTION,
    DESTINATION_INSTRUCTION,
    DIRECTIONS,
    WAYPOINT_TURNS,
    start_instruction,
)
from .models import Coord, Route, RoutePoint, RouteSegment, TransportMode
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Route assembly (shared with persistence and tests)
# ---------------------------------------------------------------------------

def _mean_aqi(points: Sequence[RoutePoint]) -> Optional[float]:
    values = [p.aqi for p in points if p.aqi is not None]
    if not values:
        return None
    return float(np.mean(values))


def build_segments(points: Sequence[RoutePoint], mode: TransportMode) -> List[RouteSegment]:
    """
    Partition points into runs that share one instruction.

    A new segment opens on every point whose non-empty instruction differs
    from the open segment's. Each segment's distance includes the leg leading
    into its first point, so segment distances add up to the route length.

    Args:
        points: Ordered route points.
        mode:   Transport mode used to convert distance to time.

    Returns:
        Segments in route order; concatenating their points gives `points`.
    """
    if not points:
        return []

    segments: List[RouteSegment] = []
    run: List[RoutePoint] = [points[0]]
    run_start = 0
    run_instruction = points[0].instruction or CONTINUE_INSTRUCTION
    run_distance = 0.0

    def close_run() -> None:
        segments.append(RouteSegment(
            instruction=run_instruction,
            points=tuple(run),
            start_index=run_start,
            distance_m=run_distance,
            time_s=duration_seconds(run_distance, mode),
            average_aqi=_mean_aqi(run),
        ))

    for i in range(1, len(points)):
        point = points[i]
        leg = haversine_distance(points[i - 1].coord, point.coord)

        if point.instruction and point.instruction != run_instruction:
            close_run()
            run = [point]
            run_start = i
            run_instruction = point.instruction
            run_distance = leg
        else:
            run.append(point)
            run_distance += leg

    close_run()
    return segments


def assemble_route(points: Sequence[RoutePoint], mode: TransportMode) -> Route:
    """
    Fill in cumulative distance/time, segments and totals for a point list.

    Cumulative values already present on the points are recomputed from
    their coordinates.
    """
    annotated: List[RoutePoint] = []
    cumulative = 0.0
    for i, point in enumerate(points):
        if i > 0:
            cumulative += haversine_distance(points[i - 1].coord, point.coord)
        annotated.append(replace(
            point,
            cumulative_distance_m=cumulative,
            cumulative_time_s=duration_seconds(cumulative, mode),
        ))

    total_distance = annotated[-1].cumulative_distance_m if annotated else 0.0
    return Route(
        points=tuple(annotated),
        mode=mode,
        total_distance_m=total_distance,
        total_duration_s=duration_seconds(total_distance, mode),
        average_aqi=_mean_aqi(annotated),
        segments=tuple(build_segments(annotated, mode)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class RouteSynthesizer:
    """
    Synthesizes a gently curved waypoint route annotated with AQI values.

    Args:
        config:      NavConfig instance.
        air_quality: AQI source; defaults to the synthetic profile.
        rng:         Seedable random source for curvature jitter and
                     instruction directions.
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        air_quality: Optional[AirQualityProvider] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.config = config or NavConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.air_quality = air_quality or SyntheticAirQualityProvider(self.rng)

    def generate_route(
        self,
        origin: Coord,
        destination: Coord,
        mode: TransportMode,
        interior_point_count: Optional[int] = None,
        prefer_low_aqi: bool = False,
    ) -> Route:
        """
        Build a route from origin to destination.

        Args:
            origin:               Starting coordinate.
            destination:          Target coordinate.
            mode:                 Transport mode (sets speed and start text).
            interior_point_count: Waypoints between the two ends; config
                                  default when omitted.
            prefer_low_aqi:       Compare several candidates and keep the
                                  one with the lowest average AQI.

        Returns:
            Route with at least three points.

        Raises:
            DegenerateRouteError: origin and destination coincide.
            RouteGenerationError: interior_point_count is below 1.
        """
        count = self.config.interior_point_count if interior_point_count is None else interior_point_count
        if count < 1:
            raise RouteGenerationError(f"interior_point_count must be >= 1, got {count}")

        if haversine_distance(origin, destination) == 0.0:
            raise DegenerateRouteError(f"Origin and destination are the same point: {origin}")

        if not prefer_low_aqi:
            route = self._build_candidate(origin, destination, mode, count, side=1.0)
        else:
            candidates = [
                self._build_candidate(origin, destination, mode, count, side=1.0 if k % 2 == 0 else -1.0)
                for k in range(max(1, self.config.candidate_count))
            ]
            route = min(
                candidates,
                key=lambda r: r.average_aqi if r.average_aqi is not None else math.inf,
            )
            logger.debug(
                f"Compared {len(candidates)} candidates; "
                f"kept average AQI {route.average_aqi}"
            )

        logger.info(
            f"Route synthesized: {len(route.points)} points, "
            f"{route.total_distance_m:.0f} m, {len(route.segments)} segments."
        )
        return route

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_candidate(
        self,
        origin: Coord,
        destination: Coord,
        mode: TransportMode,
        interior_count: int,
        side: float,
    ) -> Route:
        coords = self._path_coords(origin, destination, interior_count, side)
        last = len(coords) - 1
        points = [
            RoutePoint(coord=c, aqi=self.air_quality.aqi_at(c, i / last))
            for i, c in enumerate(coords)
        ]
        return assemble_route(self._with_instructions(points, mode), mode)

    def _path_coords(
        self, origin: Coord, destination: Coord, interior_count: int, side: float
    ) -> List[Coord]:
        """Straight interpolation bowed sideways by a sine profile, plus jitter."""
        lat_diff = destination.lat - origin.lat
        # Shortest way round, so antimeridian crossings stay short
        lon_diff = wrap_longitude(destination.lon - origin.lon)

        # Unit vector perpendicular to origin -> destination
        perp_length = math.hypot(lat_diff, lon_diff)
        norm_lat = -lon_diff / perp_length
        norm_lon = lat_diff / perp_length

        half_jitter = self.config.jitter_strength / 2
        last = interior_count + 1
        coords = [origin]
        for i in range(1, last):
            progress = i / last
            curve = math.sin(progress * math.pi) * self.config.curve_strength * side
            jitter_lat = self.rng.uniform(-half_jitter, half_jitter)
            jitter_lon = self.rng.uniform(-half_jitter, half_jitter)
            coords.append(Coord(
                origin.lat + lat_diff * progress + norm_lat * curve + jitter_lat,
                wrap_longitude(origin.lon + lon_diff * progress + norm_lon * curve + jitter_lon),
            ))
        coords.append(destination)
        return coords

    def _with_instructions(
        self, points: List[RoutePoint], mode: TransportMode
    ) -> List[RoutePoint]:
        """Start text on the first point, turns at 25/50/75 %, arrival on the last."""
        n = len(points)
        instructions = {0: start_instruction(mode)}
        for fraction, template in WAYPOINT_TURNS:
            idx = math.floor(n * fraction)
            if 0 < idx < n - 1:
                direction = DIRECTIONS[int(self.rng.integers(len(DIRECTIONS)))]
                instructions[idx] = template.format(direction=direction)
        instructions[n - 1] = DESTINATION_INSTRUCTION

        return [
            replace(p, instruction=instructions[i]) if i in instructions else p
            for i, p in enumerate(points)
        ]
