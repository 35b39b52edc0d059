from __future__ import annotations

import pytest

from src.domain.algorithms.departures import candidate_departures_at
from src.domain.algorithms.schedule_index import build_schedule_index
from src.domain.algorithms.schedule_time import DAY_S
from src.domain.models import GtfsTables, Route, Stop, StopVisit, Trip


def _tables(departures: dict[str, int | None]) -> GtfsTables:
    trips = tuple(Trip(trip_id, "R1", "S") for trip_id in departures)
    stop_times: list[StopVisit] = []
    for trip_id, dep in departures.items():
        stop_times.append(StopVisit(trip_id, "A", 1, arrival_s=dep, departure_s=dep))
        end = dep + 600 if dep is not None else None
        stop_times.append(StopVisit(trip_id, "B", 2, arrival_s=end, departure_s=end))
    return GtfsTables(
        routes=(Route("R1", "1"),),
        trips=trips,
        stop_times=tuple(stop_times),
        stops=(Stop("A", "A"), Stop("B", "B")),
    )


@pytest.mark.unit
def test_strict_service_keeps_only_active_trips_sorted() -> None:
    index = build_schedule_index(
        _tables({"late": 40000, "early": 37000, "inactive": 36500})
    )

    events = candidate_departures_at(
        index, "A", 36000, active_trip_ids={"late", "early"}
    )

    assert [e.trip_id for e in events] == ["early", "late"]
    assert [e.departure_s for e in events] == [37000, 40000]
    assert all(e.position == 0 for e in events)


@pytest.mark.unit
def test_relaxed_service_ignores_active_set() -> None:
    index = build_schedule_index(_tables({"t1": 37000}))
    events = candidate_departures_at(index, "A", 36000, strict_service=False)
    assert [e.trip_id for e in events] == ["t1"]


@pytest.mark.unit
def test_window_bounds_and_missing_times() -> None:
    index = build_schedule_index(
        _tables({"past": 35000, "edge": 36000, "far": 36000 + 7 * 3600, "bad": None})
    )
    all_trips = {"past", "edge", "far", "bad"}

    events = candidate_departures_at(index, "A", 36000, active_trip_ids=all_trips)
    assert [e.trip_id for e in events] == ["edge"]

    wider = candidate_departures_at(
        index, "A", 36000, active_trip_ids=all_trips, max_s=36000 + 8 * 3600
    )
    assert [e.trip_id for e in wider] == ["edge", "far"]


@pytest.mark.unit
def test_wrap_to_next_day_moves_earlier_departures_forward() -> None:
    index = build_schedule_index(_tables({"morning": 8 * 3600}))

    events = candidate_departures_at(
        index,
        "A",
        12 * 3600,
        strict_service=False,
        wrap_to_next_day=True,
        max_s=12 * 3600 + 36 * 3600,
    )

    assert [e.departure_s for e in events] == [8 * 3600 + DAY_S]


@pytest.mark.unit
def test_limit_and_exclusions() -> None:
    index = build_schedule_index(
        _tables({f"t{i}": 36000 + i * 60 for i in range(5)})
    )
    everyone = {f"t{i}" for i in range(5)}

    limited = candidate_departures_at(
        index, "A", 36000, active_trip_ids=everyone, limit=2
    )
    assert [e.trip_id for e in limited] == ["t0", "t1"]

    excluded = candidate_departures_at(
        index, "A", 36000, active_trip_ids=everyone, limit=2, exclude_trip_ids={"t0"}
    )
    assert [e.trip_id for e in excluded] == ["t1", "t2"]


@pytest.mark.unit
def test_unknown_stop_has_no_departures(sample_tables: GtfsTables) -> None:
    index = build_schedule_index(sample_tables)
    assert candidate_departures_at(index, "nowhere", 0, strict_service=False) == []
