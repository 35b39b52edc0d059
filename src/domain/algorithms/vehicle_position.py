from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.domain.models.geo import GeoPoint
from src.domain.models.gtfs import StopVisit
from src.domain.models.stop import Stop


def bracketing_visits(
    visits: Sequence[StopVisit], now_s: int
) -> tuple[StopVisit, StopVisit] | None:
    """(previous, next) visits around now_s.

    Before the first visit the pair is (first, second); after the last one it
    is (first, last), which clamps to the last stop.
    """

    if not visits:
        return None

    prev = visits[0]
    nxt = visits[-1]
    for i in range(1, len(visits)):
        t = visits[i].arrival_or_departure_s
        if t is not None and t >= now_s:
            prev = visits[i - 1]
            nxt = visits[i]
            break
    return prev, nxt


def interpolation_fraction(t0: int | None, t1: int | None, now_s: int) -> float:
    if t0 is None or t1 is None or t1 <= t0:
        return 0.0
    return max(0.0, min(1.0, (now_s - t0) / (t1 - t0)))


def estimate_position(
    visits: Sequence[StopVisit], now_s: int, stops_by_id: Mapping[str, Stop]
) -> GeoPoint | None:
    """Straight-line position between the two stops bracketing now_s."""

    pair = bracketing_visits(visits, now_s)
    if pair is None:
        return None
    prev, nxt = pair

    prev_stop = stops_by_id.get(prev.stop_id)
    next_stop = stops_by_id.get(nxt.stop_id)
    if prev_stop is None or next_stop is None:
        return None
    if prev_stop.location is None or next_stop.location is None:
        return None

    fraction = interpolation_fraction(
        prev.departure_or_arrival_s, nxt.arrival_or_departure_s, now_s
    )
    return prev_stop.location.towards(next_stop.location, fraction)
