# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

import os
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Route synthesis
    interior_point_count: int = 20
    curve_strength: float = 0.0008         # degrees, peak sideways bow of the path
    jitter_strength: float = 0.0002        # degrees, full width of per-axis jitter
    candidate_count: int = 3               # candidates compared when preferring low AQI

    # Progress tracking
    tie_tolerance_m: float = 1e-9          # equal-distance window for projection ties
    default_aqi: float = 50.0              # used when a route point carries no AQI
    aqi_alert_threshold: float = 100.0     # exposure above this is reported

    # Logging
    log_dir: str = "."                     # directory for saved JSON files
    route_filename: str = "active_route.json"
    session_filename: str = "nav_session.jsonl"

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @property
    def session_filepath(self) -> str:
        return os.path.join(self.log_dir, self.session_filename)
