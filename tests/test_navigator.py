"""
Tests for the NavigationSystem facade.

Tests cover:
- Start/stop lifecycle and (success, message) results
- Route file and session log written under the configured directory
- Instruction callback and AQI exposure alerts
- Driving a session from a position source
"""

import logging
import os

import numpy as np
import pytest

from airnav.errors import TrackerStateError
from airnav.models import Coord, PositionFix, TrackerPhase, TransportMode
from airnav.nav_config import NavConfig
from airnav.navigator import NavigationSystem
from airnav.position_source import ReplayPositionSource
from airnav.route_synthesizer import RouteSynthesizer

ORIGIN = Coord(51.50809, -0.12806)
DESTINATION = Coord(51.51381, -0.09846)


def route_fixes(route):
    return [PositionFix(p.coord.lat, p.coord.lon) for p in route.points]


@pytest.fixture
def config(tmp_path):
    return NavConfig(log_dir=str(tmp_path))


@pytest.fixture
def instructions():
    return []


@pytest.fixture
def nav(config, instructions):
    synthesizer = RouteSynthesizer(config, rng=np.random.default_rng(5))
    return NavigationSystem(config, synthesizer=synthesizer, on_instruction=instructions.append)


class TestStartNavigation:

    def test_success_saves_route(self, nav, config):
        ok, msg = nav.start_navigation(ORIGIN, DESTINATION, TransportMode.CYCLING)
        assert ok
        assert msg.startswith("Route ready.")
        assert nav.is_active
        assert nav.route.mode is TransportMode.CYCLING
        assert os.path.exists(config.route_filepath)

    def test_start_announces_first_instruction(self, nav, instructions):
        nav.start_navigation(ORIGIN, DESTINATION)
        assert instructions == ["Start walking route"]
        assert nav.state.progress_pct == 0.0

    def test_degenerate_request_fails_cleanly(self, nav):
        ok, msg = nav.start_navigation(ORIGIN, ORIGIN)
        assert not ok
        assert "same point" in msg
        assert not nav.is_active
        assert nav.route is None

    def test_restart_replaces_session(self, nav):
        nav.start_navigation(ORIGIN, DESTINATION)
        first = nav.route
        nav.start_navigation(DESTINATION, ORIGIN)
        assert nav.route is not first
        assert nav.route.origin.coord == DESTINATION


class TestUpdates:

    def test_update_before_start_rejected(self, nav):
        with pytest.raises(TrackerStateError):
            nav.update(PositionFix(ORIGIN.lat, ORIGIN.lon))

    def test_full_walk_completes(self, nav, instructions, config):
        nav.start_navigation(ORIGIN, DESTINATION)
        fixes = route_fixes(nav.route)
        for fix in fixes:
            state = nav.update(fix)
        assert state.progress_pct == 100.0
        assert not nav.is_active
        assert instructions[-1] == "You've reached your destination"

        with open(config.session_filepath, encoding="utf-8") as f:
            assert sum(1 for _ in f) == len(fixes)

    def test_new_session_starts_with_empty_log(self, nav):
        nav.start_navigation(ORIGIN, DESTINATION)
        for fix in route_fixes(nav.route)[:3]:
            nav.update(fix)
        nav.start_navigation(DESTINATION, ORIGIN)
        nav.update(route_fixes(nav.route)[1])
        events = nav._logger.load_session()
        assert [e["current_index"] for e in events] == [1]

    def test_stop_then_update_rejected(self, nav):
        nav.start_navigation(ORIGIN, DESTINATION)
        fixes = route_fixes(nav.route)
        last = nav.update(fixes[3])
        nav.stop_navigation()
        with pytest.raises(TrackerStateError):
            nav.update(fixes[4])
        assert nav.state is last

    def test_aqi_alert_raised_once_per_crossing(self, tmp_path, caplog):
        config = NavConfig(log_dir=str(tmp_path), aqi_alert_threshold=10.0)
        nav = NavigationSystem(config, RouteSynthesizer(config, rng=np.random.default_rng(1)))
        nav.start_navigation(ORIGIN, DESTINATION)
        with caplog.at_level(logging.WARNING, logger="airnav.navigator"):
            for fix in route_fixes(nav.route)[:6]:
                nav.update(fix)
        alerts = [r for r in caplog.records if "Air quality alert" in r.getMessage()]
        assert len(alerts) == 1
        assert "little or no risk" in alerts[0].getMessage()
        assert nav.aqi_alert_active

    def test_no_alert_below_threshold(self, nav, caplog):
        nav.start_navigation(ORIGIN, DESTINATION)
        with caplog.at_level(logging.WARNING, logger="airnav.navigator"):
            for fix in route_fixes(nav.route)[:6]:
                nav.update(fix)
        assert "Air quality alert" not in caplog.text
        assert not nav.aqi_alert_active


class TestPositionSource:

    def test_replay_drives_session_to_completion(self, nav):
        nav.start_navigation(ORIGIN, DESTINATION)
        source = ReplayPositionSource(route_fixes(nav.route))
        nav.attach_source(source)
        source.replay()
        assert nav.state.progress_pct == 100.0
        assert nav._tracker.phase is TrackerPhase.COMPLETED
        assert source.subscriber_count == 0

    def test_source_passed_to_start(self, nav):
        source = ReplayPositionSource([])
        nav.start_navigation(ORIGIN, DESTINATION, source=source)
        assert source.subscriber_count == 1
        nav.stop_navigation()
        assert source.subscriber_count == 0

    def test_attach_without_session_rejected(self, nav):
        with pytest.raises(TrackerStateError):
            nav.attach_source(ReplayPositionSource([]))
