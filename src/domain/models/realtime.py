from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class ScheduledVehicle:
    """A trip in progress, positioned from the static schedule only."""

    trip_id: str
    route_id: str | None
    line: str
    headsign: str | None
    direction_id: int | None
    next_stop_id: str
    next_stop_name: str
    eta_minutes: int
    progress: float
    position: GeoPoint | None = None


@dataclass(frozen=True, slots=True)
class StopArrival:
    trip_id: str
    line: str
    headsign: str | None
    direction_id: int | None
    eta_minutes: int


@dataclass(frozen=True, slots=True)
class DestinationArrivals:
    stop_id: str
    stop_name: str
    arrivals: tuple[StopArrival, ...] = ()
