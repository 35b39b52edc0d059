from __future__ import annotations

import pytest

from src.domain.algorithms.service_calendar import (
    active_services,
    active_trips,
    resolve_service_day,
)
from src.domain.models import ServiceException, ServiceNow, ServiceRule, Trip

WEEKDAYS_ONLY = (True, True, True, True, True, False, False)
WEEKEND_ONLY = (False, False, False, False, False, True, True)

CALENDAR = (
    ServiceRule("LAB", WEEKDAYS_ONLY, 20240101, 20241231),
    ServiceRule("FES", WEEKEND_ONLY, 20240101, 20241231),
    ServiceRule("OLD", WEEKDAYS_ONLY, 20200101, 20201231),
)


@pytest.mark.unit
def test_weekly_rules_match_weekday_and_date_range() -> None:
    assert active_services(CALENDAR, (), "20240115", "Mon") == {"LAB"}
    assert active_services(CALENDAR, (), "20240113", "Sat") == {"FES"}


@pytest.mark.unit
def test_remove_exception_wins_over_weekly_rule() -> None:
    dates = (ServiceException("LAB", "20240115", ServiceException.REMOVED),)
    assert "LAB" not in active_services(CALENDAR, dates, "20240115", "Mon")


@pytest.mark.unit
def test_exceptions_apply_in_table_order() -> None:
    add_then_remove = (
        ServiceException("FES", "20240115", ServiceException.ADDED),
        ServiceException("FES", "20240115", ServiceException.REMOVED),
    )
    remove_then_add = tuple(reversed(add_then_remove))

    assert "FES" not in active_services(CALENDAR, add_then_remove, "20240115", "Mon")
    assert "FES" in active_services(CALENDAR, remove_then_add, "20240115", "Mon")


@pytest.mark.unit
def test_exceptions_for_other_dates_are_ignored() -> None:
    dates = (ServiceException("LAB", "20240116", ServiceException.REMOVED),)
    assert active_services(CALENDAR, dates, "20240115", "Mon") == {"LAB"}


@pytest.mark.unit
def test_active_services_is_idempotent() -> None:
    dates = (ServiceException("FES", "20240115", ServiceException.ADDED),)
    first = active_services(CALENDAR, dates, "20240115", "Mon")
    second = active_services(CALENDAR, dates, "20240115", "Mon")
    assert first == second == {"LAB", "FES"}


@pytest.mark.unit
def test_empty_result_falls_back_to_displayed_services() -> None:
    result = active_services(
        CALENDAR, (), "20300101", "Tue", fallback_service_ids=("LAB", "")
    )
    assert result == {"LAB"}


@pytest.mark.unit
def test_active_trips_covers_the_whole_trip_table() -> None:
    trips = (Trip("t1", "r1", "LAB"), Trip("t2", "r2", "FES"), Trip("t3", "r9", "LAB"))
    assert active_trips(trips, {"LAB"}) == {"t1", "t3"}


@pytest.mark.unit
def test_resolve_service_day_flags_the_fallback() -> None:
    trips = (Trip("t1", "r1", "LAB"), Trip("t2", "r2", "FES"))

    day = resolve_service_day(
        CALENDAR, (), trips, ServiceNow("20240115", "2024-01-15", "Mon", 3600)
    )
    assert day.active_service_ids == {"LAB"}
    assert day.active_trip_ids == {"t1"}
    assert day.used_fallback is False

    stale = resolve_service_day(
        CALENDAR,
        (),
        trips,
        ServiceNow("20300101", "2030-01-01", "Tue", 3600),
        fallback_service_ids={"FES"},
    )
    assert stale.active_service_ids == {"FES"}
    assert stale.active_trip_ids == {"t2"}
    assert stale.used_fallback is True
