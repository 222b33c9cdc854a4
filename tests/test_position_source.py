"""
Tests for ReplayPositionSource and subscription handles.
"""

from airnav.models import PositionFix
from airnav.position_source import ReplayPositionSource

from conftest import STEP_DEG


def equator_fixes(n, timestamps=None):
    return [
        PositionFix(0.0, i * STEP_DEG, timestamp=None if timestamps is None else timestamps[i])
        for i in range(n)
    ]


class TestReplayFiltering:

    def test_all_fixes_delivered_without_filters(self):
        received = []
        source = ReplayPositionSource(equator_fixes(6))
        source.subscribe(received.append)
        assert source.replay() == 6
        assert len(received) == 6

    def test_distance_filter_drops_small_moves(self):
        received = []
        source = ReplayPositionSource(equator_fixes(6), min_distance_m=100.0)
        source.subscribe(received.append)
        assert source.replay() == 3
        assert [f.lon for f in received] == [0.0, 2 * STEP_DEG, 4 * STEP_DEG]

    def test_interval_filter_uses_timestamps(self):
        received = []
        source = ReplayPositionSource(
            equator_fixes(5, timestamps=[0.0, 0.5, 1.0, 1.5, 2.0]), min_interval_s=1.0,
        )
        source.subscribe(received.append)
        assert source.replay() == 3
        assert [f.timestamp for f in received] == [0.0, 1.0, 2.0]

    def test_interval_filter_ignored_without_timestamps(self):
        source = ReplayPositionSource(equator_fixes(4), min_interval_s=5.0)
        source.subscribe(lambda fix: None)
        assert source.replay() == 4


class TestSubscriptions:

    def test_no_subscribers_delivers_nothing(self):
        assert ReplayPositionSource(equator_fixes(3)).replay() == 0

    def test_unsubscribe_is_idempotent(self):
        source = ReplayPositionSource([])
        sub = source.subscribe(lambda fix: None)
        assert source.subscriber_count == 1
        sub.unsubscribe()
        sub.unsubscribe()
        assert not sub.active
        assert source.subscriber_count == 0

    def test_unsubscribe_during_replay_stops_delivery(self):
        received = []
        source = ReplayPositionSource(equator_fixes(10))

        def callback(fix):
            received.append(fix)
            if len(received) == 2:
                sub.unsubscribe()

        sub = source.subscribe(callback)
        assert source.replay() == 2
        assert len(received) == 2

    def test_remaining_subscriber_keeps_receiving(self):
        first, second = [], []
        source = ReplayPositionSource(equator_fixes(5))

        def one_shot(fix):
            first.append(fix)
            sub.unsubscribe()

        sub = source.subscribe(one_shot)
        source.subscribe(second.append)
        assert source.replay() == 5
        assert len(first) == 1
        assert len(second) == 5
