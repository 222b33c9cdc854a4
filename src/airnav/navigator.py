# navigator.py
# Public entry point for the navigation system.
# Owns no business logic; delegates everything to specialist modules.

import logging
from typing import Callable, Optional, Tuple

from .air_quality import aqi_category, aqi_health_implications, exceeds_threshold
from .errors import RouteGenerationError, TrackerStateError
from .models import Coord, NavigationState, PositionFix, Route, SegmentChange, TransportMode
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .position_source import PositionSource, Subscription
from .route_synthesizer import RouteSynthesizer
from .route_tracker import NavigationTracker

logger = logging.getLogger(__name__)


class NavigationSystem:
    """
    High-level navigation facade.

    Typical lifecycle:
        nav = NavigationSystem()
        nav.start_navigation(Coord(51.507, -0.128), Coord(51.513, -0.098),
                             TransportMode.WALKING)

        # GPS loop:
        state = nav.update(PositionFix(lat, lon))

    Args:
        config:         Optional NavConfig; defaults to NavConfig().
        synthesizer:    Route builder; one is created from config if omitted.
        nav_logger:     File persistence; one is created from config if omitted.
        on_instruction: Called with the new instruction text on every
                        segment change (e.g. a speech or notification hook).
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        synthesizer: Optional[RouteSynthesizer] = None,
        nav_logger: Optional[NavLogger] = None,
        on_instruction: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or NavConfig()

        # Specialist modules
        self._synthesizer = synthesizer or RouteSynthesizer(self.config)
        self._logger      = nav_logger or NavLogger(self.config)
        self._tracker: Optional[NavigationTracker] = None
        self._subscription: Optional[Subscription] = None

        self._on_instruction = on_instruction
        self._aqi_alert_active = False

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start_navigation(
        self,
        origin: Coord,
        destination: Coord,
        mode: TransportMode = TransportMode.WALKING,
        source: Optional[PositionSource] = None,
        prefer_low_aqi: bool = False,
    ) -> Tuple[bool, str]:
        """
        Synthesize a route and begin tracking.

        Args:
            origin:         Starting coordinate.
            destination:    Target coordinate.
            mode:           Transport mode.
            source:         Optional position source to subscribe to.
            prefer_low_aqi: Pick the lowest-AQI candidate route.

        Returns:
            (success, message)
        """
        if self._tracker is not None and self._tracker.is_active:
            self.stop_navigation()

        logger.info(f"Synthesizing route: {origin} → {destination} ({mode.value})")
        try:
            route = self._synthesizer.generate_route(
                origin, destination, mode, prefer_low_aqi=prefer_low_aqi,
            )
        except RouteGenerationError as e:
            logger.warning(f"Route synthesis failed: {e}")
            return False, str(e)

        self._tracker = NavigationTracker(
            route, mode, self.config, on_segment_change=self._handle_segment_change,
        )
        self._aqi_alert_active = False
        self._tracker.start()
        self._logger.save_route(route)
        self._logger.clear_session()

        if source is not None:
            try:
                self.attach_source(source)
            except Exception:
                self.stop_navigation()
                raise

        summary = route.summary()
        logger.info(
            f"Route ready: {summary['distance']}, {summary['duration']}, "
            f"air quality {summary['aqi']}."
        )
        return True, f"Route ready. {len(route.points)} points, {summary['distance']}."

    def attach_source(self, source: PositionSource) -> None:
        """Feed every fix from source into update() until the session ends."""
        if not self.is_active:
            raise TrackerStateError("Start navigation before attaching a position source.")
        self._release_subscription()
        self._subscription = source.subscribe(self.update)

    def stop_navigation(self) -> None:
        """Forcibly end the current navigation session."""
        self._release_subscription()
        if self._tracker is not None:
            self._tracker.stop()
        logger.info("Navigation stopped by user.")

    # ------------------------------------------------------------------
    # GPS update: call this on every position fix
    # ------------------------------------------------------------------

    def update(self, fix: PositionFix) -> NavigationState:
        """
        Process a new GPS position and return the current navigation state.

        Args:
            fix: Current position sample.

        Returns:
            NavigationState after this fix.

        Raises:
            TrackerStateError: no session is running.
        """
        if self._tracker is None:
            raise TrackerStateError("No navigation session has been started.")

        state = self._tracker.on_position_update(fix)
        self._logger.log_event(state, fix)
        self._check_exposure(state)

        if not self._tracker.is_active:
            self._release_subscription()
        return state

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._tracker is not None and self._tracker.is_active

    @property
    def route(self) -> Optional[Route]:
        return self._tracker.route if self._tracker else None

    @property
    def state(self) -> Optional[NavigationState]:
        return self._tracker.state if self._tracker else None

    @property
    def aqi_alert_active(self) -> bool:
        return self._aqi_alert_active

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _handle_segment_change(self, event: SegmentChange) -> None:
        logger.info(f"[Nav] {event.instruction}")
        if self._on_instruction is not None:
            self._on_instruction(event.instruction)

    def _check_exposure(self, state: NavigationState) -> None:
        """Warn once each time exposure crosses above the alert threshold."""
        if state.current_aqi is None:
            return
        exceeding = exceeds_threshold(state.current_aqi, self.config.aqi_alert_threshold)
        if exceeding and not self._aqi_alert_active:
            logger.warning(
                f"Air quality alert: AQI {state.current_aqi:.0f} "
                f"({aqi_category(state.current_aqi).value}) above "
                f"{self.config.aqi_alert_threshold:.0f}. "
                f"{aqi_health_implications(state.current_aqi)}"
            )
        self._aqi_alert_active = exceeding

    def _release_subscription(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
