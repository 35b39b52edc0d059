from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from src.domain.models import GeoPoint, Stop


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    r = 6371000.0
    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lon)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * r * math.asin(math.sqrt(s))


def nearest_stops(
    stops_by_id: Mapping[str, Stop],
    stop_ids: Iterable[str],
    *,
    point: GeoPoint,
    limit: int,
) -> list[tuple[Stop, float]]:
    """Closest stops among `stop_ids`, as (stop, distance_m), nearest first.

    Stops that are unknown or have no coordinates are ignored.
    """

    scored: list[tuple[float, str, Stop]] = []
    for stop_id in stop_ids:
        stop = stops_by_id.get(stop_id)
        if stop is None or stop.location is None:
            continue
        scored.append((haversine_distance_m(point, stop.location), stop.id, stop))

    scored.sort(key=lambda x: (x[0], x[1]))
    return [(stop, d) for d, _, stop in scored[: max(0, int(limit))]]
