# main.py
# Entry point: simulates a GPS loop feeding positions into NavigationSystem.
# In production, replace ReplayPositionSource with a wrapper around the
# device's location feed.
#
# Run with: python -m airnav.main

import logging

import numpy as np

from .models import Coord, PositionFix, TransportMode
from .nav_config import NavConfig
from .navigator import NavigationSystem
from .position_source import ReplayPositionSource
from .route_synthesizer import RouteSynthesizer

# ------------------------------------------------------------------
# Logging setup: configure once here, all modules inherit
# ------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# ------------------------------------------------------------------
# Config: tweak thresholds or paths here, not inside the modules
# ------------------------------------------------------------------
config = NavConfig(
    interior_point_count=20,
    aqi_alert_threshold=60.0,
    log_dir="logs",
)

# Trafalgar Square -> St Paul's Cathedral, London
ORIGIN      = Coord(51.50809, -0.12806)
DESTINATION = Coord(51.51381, -0.09846)


def main() -> None:
    # 1. Seeded synthesizer so every demo run draws the same route
    synthesizer = RouteSynthesizer(config, rng=np.random.default_rng(7))
    nav = NavigationSystem(
        config, synthesizer=synthesizer,
        on_instruction=lambda text: print(f"  → {text}"),
    )

    # 2. Walk the synthesized route point by point, like a GPS watch would
    success, msg = nav.start_navigation(
        ORIGIN, DESTINATION, TransportMode.WALKING, prefer_low_aqi=True,
    )
    if not success:
        print(f"[Main] Could not start navigation: {msg}")
        return

    fixes = [
        PositionFix(p.coord.lat, p.coord.lon, speed_mps=1.3, timestamp=float(i * 60))
        for i, p in enumerate(nav.route.points)
    ]
    source = ReplayPositionSource(fixes, min_distance_m=5.0, min_interval_s=1.0)

    print("\n--- GPS Loop Active ---")
    nav.attach_source(source)
    delivered = source.replay()

    state = nav.state
    print(
        f"  Progress {state.progress_pct:.1f}%, "
        f"{state.distance_remaining_m:.0f} m left, AQI {state.current_aqi:.1f}"
    )
    if not nav.is_active:
        print("  ✓  Destination reached. Navigation ended.")

    print("\n--- Session complete ---")
    print(f"    {delivered} fixes replayed.")
    print(f"    Log files written to: {config.log_dir}/")


if __name__ == "__main__":
    main()
