from .geo import GeoPoint
from .gtfs import (
    GtfsTables,
    Route,
    ServiceException,
    ServiceRule,
    ShapePoint,
    StopVisit,
    Trip,
)
from .itinerary import BestRoute, DirectOption, ItineraryOption, TransferOption
from .planner import PlannerSettings
from .realtime import DestinationArrivals, ScheduledVehicle, StopArrival
from .schedule import (
    DepartureEvent,
    ScheduleIndex,
    ServiceDay,
    ServiceNow,
    StopOccurrence,
)
from .stop import Stop

__all__ = [
    "BestRoute",
    "DepartureEvent",
    "DestinationArrivals",
    "DirectOption",
    "GeoPoint",
    "GtfsTables",
    "ItineraryOption",
    "PlannerSettings",
    "Route",
    "ScheduleIndex",
    "ScheduledVehicle",
    "ServiceDay",
    "ServiceException",
    "ServiceNow",
    "ServiceRule",
    "ShapePoint",
    "Stop",
    "StopArrival",
    "StopOccurrence",
    "StopVisit",
    "TransferOption",
    "Trip",
]
