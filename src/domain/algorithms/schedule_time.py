from __future__ import annotations

import math
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.domain.models.gtfs import WEEKDAYS
from src.domain.models.schedule import ServiceNow

DAY_S = 24 * 3600


def parse_schedule_time(raw: object) -> int | None:
    """Parse a GTFS clock value (H:MM[:SS]) into service-day seconds.

    Hours may exceed 23 for trips running past midnight. Returns None instead of
    raising when the value is missing or malformed.
    """

    if not isinstance(raw, str) or not raw.strip():
        return None
    parts = raw.strip().split(":")
    if len(parts) < 2:
        return None

    values: list[int] = []
    for part in parts[:3]:
        part = part.strip()
        if not (part.isascii() and part.isdigit()):
            return None
        values.append(int(part))

    hh, mm = values[0], values[1]
    ss = values[2] if len(values) > 2 else 0
    return hh * 3600 + mm * 60 + ss


def format_hms(seconds: int) -> str:
    hh, rest = divmod(int(seconds), 3600)
    mm, ss = divmod(rest, 60)
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def minutes_ceil(seconds: int) -> int:
    return int(math.ceil(seconds / 60))


def wrap_forward(seconds: int, floor_s: int) -> int:
    """Shift a clock value by whole days until it is not earlier than floor_s."""

    if seconds >= floor_s:
        return seconds
    days = -((seconds - floor_s) // DAY_S)
    return seconds + days * DAY_S


def now_in_timezone(tz: str, now: datetime | None = None) -> ServiceNow:
    """Resolve wall-clock time in `tz` into the service date, weekday and seconds.

    `now` may be passed (aware or naive UTC) to pin the snapshot.
    """

    try:
        zone = ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {tz}") from exc

    if now is None:
        local = datetime.now(zone)
    elif now.tzinfo is None:
        local = now.replace(tzinfo=ZoneInfo("UTC")).astimezone(zone)
    else:
        local = now.astimezone(zone)

    return ServiceNow(
        service_date=local.strftime("%Y%m%d"),
        date_iso=local.strftime("%Y-%m-%d"),
        weekday=WEEKDAYS[local.weekday()],
        seconds_of_day=local.hour * 3600 + local.minute * 60 + local.second,
    )
