from __future__ import annotations

import pytest

from src.domain.algorithms.schedule_time import parse_schedule_time
from src.domain.models import (
    GeoPoint,
    GtfsTables,
    Route,
    ServiceRule,
    ShapePoint,
    Stop,
    StopVisit,
    Trip,
)

ALL_WEEK = (True, True, True, True, True, True, True)


def _visit(trip_id: str, stop_id: str, seq: int, clock: str) -> StopVisit:
    t = parse_schedule_time(clock)
    return StopVisit(
        trip_id=trip_id, stop_id=stop_id, sequence=seq, arrival_s=t, departure_s=t
    )


@pytest.fixture
def sample_tables() -> GtfsTables:
    """Two lines around three stops.

    - A1 (470): X 10:00 -> Y 10:20
    - B1 (470): X 10:30 -> M 10:40
    - C1 (473): M 10:45 -> Y 11:00
    """

    return GtfsTables(
        routes=(
            Route(route_id="R470", short_name="470"),
            Route(route_id="R473", short_name="473"),
        ),
        trips=(
            Trip("A1", "R470", "WK", "Yaiza", direction_id=0, shape_id="S470"),
            Trip("B1", "R470", "WK", "Mercado", direction_id=0, shape_id="S470"),
            Trip("C1", "R473", "WK", headsign="Yaiza", direction_id=1),
        ),
        stop_times=(
            _visit("A1", "X", 1, "10:00:00"),
            _visit("A1", "Y", 2, "10:20:00"),
            _visit("B1", "X", 1, "10:30:00"),
            _visit("B1", "M", 2, "10:40:00"),
            _visit("C1", "M", 1, "10:45:00"),
            _visit("C1", "Y", 2, "11:00:00"),
        ),
        stops=(
            Stop(id="X", name="Xarco", location=GeoPoint(lat=28.0, lon=-16.0)),
            Stop(id="M", name="Mercado", location=GeoPoint(lat=28.0, lon=-16.1)),
            Stop(id="Y", name="Yaiza", location=GeoPoint(lat=28.0, lon=-16.2)),
            Stop(id="W", name="", location=GeoPoint(lat=28.1, lon=-16.2)),
        ),
        shapes=(
            ShapePoint("S470", 2, GeoPoint(lat=28.0, lon=-16.2)),
            ShapePoint("S470", 1, GeoPoint(lat=28.0, lon=-16.0)),
        ),
        calendar=(ServiceRule("WK", ALL_WEEK, 20200101, 20991231),),
        timezone="Atlantic/Canary",
    )
