from .planner import (
    FeedLoadError,
    GeocodingError,
    PlaceNotFound,
    PlannerError,
    UnknownStop,
)

__all__ = [
    "FeedLoadError",
    "GeocodingError",
    "PlaceNotFound",
    "PlannerError",
    "UnknownStop",
]
