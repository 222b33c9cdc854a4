# nav_logger.py
# File persistence for navigation sessions.
# The active route is a single JSON document; fixes and the states they
# produced are appended to a JSON-lines session log.

import json
import os
import logging
from datetime import datetime
from typing import List, Optional

from .models import NavigationState, PositionFix, Route
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


class NavLogger:
    """
    Reads and writes the route file and the session log.

    I/O failures are logged and reported through the return value; they
    never interrupt navigation.

    Args:
        config: NavConfig supplying log_dir and file names.
    """

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()
        os.makedirs(self.config.log_dir, exist_ok=True)

    # ------------------------------------------------------------------
    # Active route
    # ------------------------------------------------------------------

    def save_route(self, route: Route) -> bool:
        """
        Write route to the configured route file.

        Returns:
            True if the file was written.
        """
        target = self.config.route_filepath
        document = {
            "saved_at": datetime.now().isoformat(),
            "point_count": len(route.points),
            "route": route.to_dict(),
        }
        try:
            with open(target, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
        except IOError as e:
            logger.error(f"Could not write route file {target}: {e}")
            return False
        logger.info(f"Saved {len(route.points)}-point route to {target}.")
        return True

    def load_route(self, filepath: Optional[str] = None) -> Optional[Route]:
        """
        Read a route written by save_route().

        Args:
            filepath: File to read instead of the configured route file.

        Returns:
            The route, or None when the file is missing or unreadable.
        """
        source = filepath or self.config.route_filepath
        try:
            with open(source, "r", encoding="utf-8") as f:
                route = Route.from_dict(json.load(f)["route"])
        except (IOError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Could not read route file {source}: {e}")
            return None
        logger.info(f"Loaded {len(route.points)}-point route from {source}.")
        return route

    # ------------------------------------------------------------------
    # Session log
    # ------------------------------------------------------------------

    def clear_session(self) -> None:
        """Truncate the session log so a new session starts empty."""
        try:
            open(self.config.session_filepath, "w", encoding="utf-8").close()
        except IOError as e:
            logger.error(f"Could not reset session log: {e}")

    def log_event(self, state: NavigationState, fix: PositionFix) -> None:
        """Append one line recording fix and the state it produced."""
        line = {
            "timestamp": datetime.now().isoformat(),
            "lat": getattr(fix, "lat", None),
            "lon": getattr(fix, "lon", None),
            "speed_mps": getattr(fix, "speed_mps", None),
        }
        line.update(state.to_dict())
        try:
            with open(self.config.session_filepath, "a", encoding="utf-8") as f:
                f.write(json.dumps(line, ensure_ascii=False) + "\n")
        except (IOError, TypeError, ValueError) as e:
            logger.error(f"Could not append to session log: {e}")

    def load_session(self) -> List[dict]:
        """
        Events recorded so far, oldest first.

        Lines that are not valid JSON are skipped with a warning.
        """
        events: List[dict] = []
        try:
            with open(self.config.session_filepath, "r", encoding="utf-8") as f:
                for lineno, raw in enumerate(f, start=1):
                    if not raw.strip():
                        continue
                    try:
                        events.append(json.loads(raw))
                    except ValueError:
                        logger.warning(f"Skipping corrupt session line {lineno}.")
        except IOError as e:
            logger.error(f"Could not read session log: {e}")
        return events
