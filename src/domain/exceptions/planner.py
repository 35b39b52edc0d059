class PlannerError(Exception):
    """Base exception for trip planning failures."""


class FeedLoadError(PlannerError, RuntimeError):
    """Raised when a mandatory GTFS table is missing or unreadable."""


class UnknownStop(PlannerError, LookupError):
    """Raised when a request references a stop id absent from the dataset."""


class GeocodingError(PlannerError):
    """Raised when the place lookup service cannot be reached or answers badly."""


class PlaceNotFound(PlannerError):
    """Raised when the place lookup succeeds but yields no usable stop."""
