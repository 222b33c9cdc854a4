"""
Tests for AQI providers and classification.
"""

import numpy as np
import pytest

from airnav.air_quality import (
    AqiCategory,
    StationAirQualityProvider,
    StationReading,
    SyntheticAirQualityProvider,
    aqi_category,
    aqi_color,
    aqi_description,
    aqi_health_implications,
    exceeds_threshold,
)
from airnav.models import Coord


class TestAqiCategory:

    @pytest.mark.parametrize("aqi, expected", [
        (0, AqiCategory.GOOD),
        (50, AqiCategory.GOOD),
        (51, AqiCategory.MODERATE),
        (100, AqiCategory.MODERATE),
        (101, AqiCategory.UNHEALTHY_SENSITIVE),
        (150, AqiCategory.UNHEALTHY_SENSITIVE),
        (151, AqiCategory.UNHEALTHY),
        (200, AqiCategory.UNHEALTHY),
        (201, AqiCategory.VERY_UNHEALTHY),
        (300, AqiCategory.VERY_UNHEALTHY),
        (301, AqiCategory.HAZARDOUS),
        (500, AqiCategory.HAZARDOUS),
    ])
    def test_band_boundaries(self, aqi, expected):
        assert aqi_category(aqi) is expected

    def test_colors(self):
        assert aqi_color(42) == "#4CAF50"
        assert aqi_color(75) == "#FFEB3B"
        assert aqi_color(120) == "#FF9800"
        assert aqi_color(180) == "#F44336"
        assert aqi_color(250) == "#9C27B0"
        assert aqi_color(400) == "#7D0023"

    def test_threshold_is_strict(self):
        assert not exceeds_threshold(100.0, 100.0)
        assert exceeds_threshold(100.5, 100.0)

    @pytest.mark.parametrize("aqi, fragment", [
        (20, "little or no risk"),
        (80, "unusually sensitive"),
        (120, "Members of sensitive groups"),
        (180, "general public may experience"),
        (250, "Health alert"),
        (420, "emergency conditions"),
    ])
    def test_health_implications_per_band(self, aqi, fragment):
        assert fragment in aqi_health_implications(aqi)

    def test_description_rounds_value(self):
        assert aqi_description(72.4) == "Moderate (72)"
        assert aqi_description(301) == "Hazardous (301)"


class TestSyntheticProvider:
    """Placeholder AQI profile."""

    def test_fixed_end_values(self):
        provider = SyntheticAirQualityProvider(np.random.default_rng(0))
        assert provider.aqi_at(Coord(0.0, 0.0), 0.0) == 35.0
        assert provider.aqi_at(Coord(0.0, 0.0), 1.0) == 28.0

    def test_peak_without_noise(self):
        provider = SyntheticAirQualityProvider(np.random.default_rng(0), noise=0.0)
        assert provider.aqi_at(Coord(0.0, 0.0), 0.5) == pytest.approx(50.0)

    def test_interior_values_clamped(self):
        provider = SyntheticAirQualityProvider(np.random.default_rng(0), base=75.0)
        assert provider.aqi_at(Coord(0.0, 0.0), 0.5) == 80.0

    def test_interior_values_in_range(self):
        provider = SyntheticAirQualityProvider(np.random.default_rng(9))
        for progress in np.linspace(0.01, 0.99, 50):
            assert 20.0 <= provider.aqi_at(Coord(0.0, 0.0), progress) <= 80.0


class TestStationProvider:
    """Nearest-station lookup."""

    @pytest.fixture
    def readings(self):
        return [
            StationReading("West", Coord(0.0, 0.0), 12.0),
            StationReading("East", Coord(0.0, 1.0), 140.0),
        ]

    def test_nearest_station_wins(self, readings):
        provider = StationAirQualityProvider(readings)
        assert provider.aqi_at(Coord(0.0, 0.9), 0.5) == 140.0
        assert provider.aqi_at(Coord(0.0, 0.1), 0.5) == 12.0
        assert provider.nearest(Coord(0.0, 0.2)).name == "West"

    def test_outside_radius_uses_default(self, readings):
        provider = StationAirQualityProvider(readings, radius_m=1000.0, default_aqi=55.0)
        assert provider.nearest(Coord(0.0, 0.5)) is None
        assert provider.aqi_at(Coord(0.0, 0.5), 0.5) == 55.0

    def test_no_readings_uses_default(self):
        provider = StationAirQualityProvider([])
        assert provider.aqi_at(Coord(10.0, 10.0), 0.0) == 50.0
