"""
Pytest configuration for airnav tests.

Registers custom markers and provides shared route fixtures.
"""

from typing import Dict, Optional, Sequence

import numpy as np
import pytest

from airnav.models import Coord, Route, RoutePoint, TransportMode
from airnav.nav_config import NavConfig
from airnav.route_synthesizer import RouteSynthesizer, assemble_route

# Spacing of hand-built routes along the equator (~55.7 m)
STEP_DEG = 0.0005


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def make_route(
    n: int,
    aqi: Optional[Sequence[float]] = None,
    instructions: Optional[Dict[int, str]] = None,
    mode: TransportMode = TransportMode.WALKING,
) -> Route:
    """Straight route of n evenly spaced points heading east along the equator."""
    aqi = list(aqi) if aqi is not None else [50.0] * n
    instructions = instructions or {}
    points = [
        RoutePoint(
            coord=Coord(0.0, i * STEP_DEG),
            aqi=aqi[i],
            instruction=instructions.get(i),
        )
        for i in range(n)
    ]
    return assemble_route(points, mode)


@pytest.fixture
def straight_config():
    """Config with no curvature and no jitter, so routes are straight lines."""
    return NavConfig(curve_strength=0.0, jitter_strength=0.0)


@pytest.fixture
def synthesizer():
    """Synthesizer with a fixed seed."""
    return RouteSynthesizer(rng=np.random.default_rng(42))


@pytest.fixture
def london_route(synthesizer):
    """A default synthesized walking route across central London."""
    return synthesizer.generate_route(
        Coord(51.50809, -0.12806), Coord(51.51381, -0.09846), TransportMode.WALKING,
    )


@pytest.fixture
def instructed_route():
    """20-point route with instructions at 0, 5, 10, 15 and 19."""
    return make_route(20, instructions={
        0: "Start walking route",
        5: "Turn right and continue north",
        10: "Turn left onto the path and continue east",
        15: "Slight left and continue south",
        19: "You've reached your destination",
    })
