# errors.py
# Exception hierarchy for route synthesis and navigation tracking.


class AirNavError(Exception):
    """Base class for all errors raised by this package."""


class RouteGenerationError(AirNavError):
    """A route could not be synthesized from the given request."""


class DegenerateRouteError(RouteGenerationError):
    """Origin and destination coincide; there is no path to synthesize."""


class InvalidRouteError(AirNavError):
    """A tracker was handed a route with fewer than two points."""


class TrackerStateError(AirNavError):
    """A tracker operation was called outside the phase that allows it."""


class ProjectionError(AirNavError):
    """A position could not be projected because the route has no points."""
