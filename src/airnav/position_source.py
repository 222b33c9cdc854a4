# position_source.py
# Subscribe/unsubscribe boundary between a positioning device and the tracker.
# In production, wrap the device's location feed in something with the same
# subscribe() shape; ReplayPositionSource feeds recorded or simulated fixes.

import logging
from typing import Callable, Iterable, List, Optional, Protocol

from .geo_utils import haversine_distance
from .models import PositionFix

logger = logging.getLogger(__name__)

PositionCallback = Callable[[PositionFix], object]


class Subscription:
    """Handle returned by subscribe(); unsubscribe() is safe to call twice."""

    def __init__(self, source: "ReplayPositionSource", callback: PositionCallback) -> None:
        self._source = source
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._source._remove(self)


class PositionSource(Protocol):
    def subscribe(self, callback: PositionCallback) -> Subscription:
        ...


class ReplayPositionSource:
    """
    Delivers a fixed list of fixes to subscribers when replay() is called.

    Fixes closer than min_distance_m, or sooner than min_interval_s, to the
    last delivered fix are dropped, like a device watch configured with
    distance and time intervals.

    Args:
        fixes:          Samples to deliver, in order.
        min_distance_m: Minimum movement between delivered fixes.
        min_interval_s: Minimum time between delivered fixes (needs timestamps).
    """

    def __init__(
        self,
        fixes: Iterable[PositionFix],
        min_distance_m: float = 0.0,
        min_interval_s: float = 0.0,
    ) -> None:
        self.fixes: List[PositionFix] = list(fixes)
        self.min_distance_m = min_distance_m
        self.min_interval_s = min_interval_s
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, callback: PositionCallback) -> Subscription:
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        logger.debug(f"Subscriber added ({len(self._subscriptions)} active).")
        return sub

    def _remove(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)
            logger.debug(f"Subscriber removed ({len(self._subscriptions)} active).")

    def _should_deliver(self, fix: PositionFix, last: Optional[PositionFix]) -> bool:
        if last is None:
            return True
        if self.min_distance_m > 0:
            if haversine_distance(last.coord, fix.coord) < self.min_distance_m:
                return False
        if self.min_interval_s > 0 and fix.timestamp is not None and last.timestamp is not None:
            if fix.timestamp - last.timestamp < self.min_interval_s:
                return False
        return True

    def replay(self) -> int:
        """
        Push every qualifying fix to the current subscribers.

        Subscribers that unsubscribe during the replay stop receiving fixes.

        Returns:
            Number of fixes delivered.
        """
        delivered = 0
        last: Optional[PositionFix] = None
        for fix in self.fixes:
            if not self._subscriptions:
                break
            if not self._should_deliver(fix, last):
                continue
            last = fix
            delivered += 1
            for sub in list(self._subscriptions):
                if sub.active:
                    sub.callback(fix)
        return delivered
