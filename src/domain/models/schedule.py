from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.models.geo import GeoPoint
from src.domain.models.gtfs import Route, StopVisit, Trip
from src.domain.models.stop import Stop


@dataclass(frozen=True, slots=True)
class StopOccurrence:
    trip_id: str
    position: int  # index into ScheduleIndex.visits_by_trip[trip_id]


@dataclass(frozen=True, slots=True)
class ScheduleIndex:
    """Query-oriented view of a GTFS dataset.

    Lookups (stops/routes/trips) cover the whole dataset; visits and occurrences
    cover only the trips in scope when the index was built. Never mutated: a
    filter change builds a new index.
    """

    stops_by_id: dict[str, Stop]
    routes_by_id: dict[str, Route]
    trips_by_id: dict[str, Trip]
    visits_by_trip: dict[str, tuple[StopVisit, ...]]
    occurrences_by_stop: dict[str, tuple[StopOccurrence, ...]]
    shapes_by_id: dict[str, tuple[GeoPoint, ...]]
    scope_trip_ids: tuple[str, ...] = ()  # trips in scope, table order
    planner_stop_ids: tuple[str, ...] = ()
    fixed_destination_stop_ids: frozenset[str] = frozenset()
    line_options: tuple[str, ...] = ()

    def line_for_trip(self, trip_id: str) -> str:
        trip = self.trips_by_id.get(trip_id)
        route = self.routes_by_id.get(trip.route_id) if trip else None
        return route.label if route else "?"

    def stop_label(self, stop_id: str) -> str:
        stop = self.stops_by_id.get(stop_id)
        return stop.label if stop else stop_id


@dataclass(frozen=True, slots=True)
class ServiceNow:
    """Wall-clock "now" resolved in the dataset timezone."""

    service_date: str  # YYYYMMDD
    date_iso: str  # YYYY-MM-DD
    weekday: str  # Mon..Sun
    seconds_of_day: int


@dataclass(frozen=True, slots=True)
class ServiceDay:
    """Active service snapshot shared by every computation of one refresh."""

    now: ServiceNow
    active_service_ids: frozenset[str] = field(default_factory=frozenset)
    active_trip_ids: frozenset[str] = field(default_factory=frozenset)
    used_fallback: bool = False


@dataclass(frozen=True, slots=True)
class DepartureEvent:
    trip_id: str
    position: int
    departure_s: int
