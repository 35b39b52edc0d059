from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.domain.algorithms.schedule_time import (
    DAY_S,
    format_hms,
    minutes_ceil,
    now_in_timezone,
    parse_schedule_time,
    wrap_forward,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("00:00:00", 0),
        ("10:00:00", 36000),
        ("9:05", 9 * 3600 + 5 * 60),
        ("23:59:59", 86399),
        (" 07:30:15 ", 7 * 3600 + 30 * 60 + 15),
        ("25:10:00", 90600),
    ],
)
def test_parse_schedule_time_valid(raw: str, expected: int) -> None:
    assert parse_schedule_time(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw", [None, "", "   ", "10", "ab:cd", "10:xx:00", "-1:00", "10: :00", "１０:00"]
)
def test_parse_schedule_time_invalid_returns_none(raw: object) -> None:
    assert parse_schedule_time(raw) is None


@pytest.mark.unit
def test_past_midnight_time_sorts_after_same_day_times() -> None:
    last = parse_schedule_time("25:10:00")
    assert last is not None
    assert last > parse_schedule_time("23:59:59")  # type: ignore[operator]
    assert last > DAY_S


@pytest.mark.unit
def test_format_and_minutes_helpers() -> None:
    assert format_hms(90600) == "25:10:00"
    assert format_hms(0) == "00:00:00"
    assert minutes_ceil(0) == 0
    assert minutes_ceil(1) == 1
    assert minutes_ceil(60) == 1
    assert minutes_ceil(61) == 2


@pytest.mark.unit
def test_wrap_forward_moves_by_whole_days() -> None:
    assert wrap_forward(500, 100) == 500
    assert wrap_forward(100, 500) == 100 + DAY_S
    assert wrap_forward(100, 100 + DAY_S + 1) == 100 + 2 * DAY_S


@pytest.mark.unit
def test_now_in_timezone_winter_and_summer() -> None:
    winter = now_in_timezone(
        "Atlantic/Canary", datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
    )
    assert winter.service_date == "20240115"
    assert winter.date_iso == "2024-01-15"
    assert winter.weekday == "Mon"
    assert winter.seconds_of_day == 12 * 3600

    summer = now_in_timezone(
        "Atlantic/Canary", datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc)
    )
    assert summer.seconds_of_day == 13 * 3600


@pytest.mark.unit
def test_now_in_timezone_rolls_the_date() -> None:
    now = now_in_timezone("Europe/Madrid", datetime(2024, 1, 15, 23, 30))
    assert now.service_date == "20240116"
    assert now.weekday == "Tue"
    assert now.seconds_of_day == 30 * 60


@pytest.mark.unit
def test_now_in_timezone_rejects_unknown_zone() -> None:
    with pytest.raises(ValueError):
        now_in_timezone("Mars/Olympus")
