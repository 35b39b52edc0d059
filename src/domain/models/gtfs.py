from __future__ import annotations

from dataclasses import dataclass

from src.domain.models.geo import GeoPoint
from src.domain.models.stop import Stop

WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True, slots=True)
class Route:
    route_id: str
    short_name: str | None = None

    @property
    def label(self) -> str:
        return self.short_name or "?"


@dataclass(frozen=True, slots=True)
class Trip:
    trip_id: str
    route_id: str
    service_id: str
    headsign: str | None = None
    direction_id: int | None = None  # 0/1 per GTFS, None when unspecified
    shape_id: str | None = None


@dataclass(frozen=True, slots=True)
class StopVisit:
    """One row of stop_times.txt.

    Times are seconds since service day midnight (GTFS time semantics; may exceed 24h).
    None means the raw value was missing or could not be parsed.
    """

    trip_id: str
    stop_id: str
    sequence: int
    arrival_s: int | None
    departure_s: int | None

    @property
    def departure_or_arrival_s(self) -> int | None:
        return self.departure_s if self.departure_s is not None else self.arrival_s

    @property
    def arrival_or_departure_s(self) -> int | None:
        return self.arrival_s if self.arrival_s is not None else self.departure_s


@dataclass(frozen=True, slots=True)
class ServiceRule:
    """Weekly recurrence rule (calendar.txt). Dates are YYYYMMDD integers."""

    service_id: str
    days: tuple[bool, bool, bool, bool, bool, bool, bool]  # Mon..Sun
    start_date: int = 0
    end_date: int = 0

    def runs_on(self, weekday: str) -> bool:
        try:
            idx = WEEKDAYS.index(weekday)
        except ValueError:
            idx = 0
        return self.days[idx]


@dataclass(frozen=True, slots=True)
class ServiceException:
    """Per-date exception (calendar_dates.txt): type 1 adds, type 2 removes."""

    service_id: str
    date: str
    exception_type: int

    ADDED = 1
    REMOVED = 2


@dataclass(frozen=True, slots=True)
class ShapePoint:
    shape_id: str
    sequence: int
    location: GeoPoint


@dataclass(frozen=True, slots=True)
class GtfsTables:
    """Typed rows of a static GTFS dataset, as handed over by a loader."""

    routes: tuple[Route, ...]
    trips: tuple[Trip, ...]
    stop_times: tuple[StopVisit, ...]
    stops: tuple[Stop, ...]
    shapes: tuple[ShapePoint, ...] = ()
    calendar: tuple[ServiceRule, ...] = ()
    calendar_dates: tuple[ServiceException, ...] = ()
    timezone: str | None = None
