from __future__ import annotations

import logging
import math
import unicodedata
from collections.abc import Collection, Iterable

from src.domain.models.geo import GeoPoint
from src.domain.models.gtfs import GtfsTables, Route, StopVisit
from src.domain.models.schedule import ScheduleIndex, StopOccurrence

logger = logging.getLogger(__name__)


def collation_key(text: str) -> str:
    """Accent and case insensitive sort key (so "Ávila" sorts next to "Avila")."""

    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def _line_sort_key(line: str) -> tuple[int, float, str, str]:
    try:
        number = float(line)
    except ValueError:
        number = math.nan
    if math.isfinite(number):
        return (0, number, "", line)
    return (1, 0.0, collation_key(line), line)


def sorted_line_names(lines: Iterable[str]) -> tuple[str, ...]:
    """Numeric line names first in numeric order, then the rest alphabetically."""

    return tuple(sorted(set(lines), key=_line_sort_key))


def line_options(routes: Iterable[Route]) -> tuple[str, ...]:
    return sorted_line_names(
        name for name in ((r.short_name or "").strip() for r in routes) if name
    )


def build_schedule_index(
    tables: GtfsTables,
    *,
    route_ids: Collection[str] | None = None,
    fixed_destination_stop_ids: Iterable[str] = (),
) -> ScheduleIndex:
    """Build the derived lookups used by search and the schedule views.

    When `route_ids` is given, only trips of those routes are indexed (visits,
    occurrences, planner stops); entity lookups always cover the whole dataset.
    """

    stops_by_id = {s.id: s for s in tables.stops}
    routes_by_id = {r.route_id: r for r in tables.routes}
    trips_by_id = {t.trip_id: t for t in tables.trips}

    scope_trip_ids = tuple(
        t.trip_id
        for t in tables.trips
        if route_ids is None or t.route_id in route_ids
    )
    in_scope = set(scope_trip_ids)

    grouped: dict[str, list[StopVisit]] = {}
    unknown_trip_rows = 0
    for visit in tables.stop_times:
        if visit.trip_id not in trips_by_id:
            unknown_trip_rows += 1
            continue
        if visit.trip_id not in in_scope:
            continue
        grouped.setdefault(visit.trip_id, []).append(visit)
    if unknown_trip_rows:
        logger.warning(
            "Skipped %d stop_times rows referencing unknown trips", unknown_trip_rows
        )

    visits_by_trip: dict[str, tuple[StopVisit, ...]] = {}
    occurrences: dict[str, list[StopOccurrence]] = {}
    for trip_id, visits in grouped.items():
        # sort() is stable: duplicated sequence numbers keep table order.
        visits.sort(key=lambda v: v.sequence)
        visits_by_trip[trip_id] = tuple(visits)
        for position, visit in enumerate(visits):
            occurrences.setdefault(visit.stop_id, []).append(
                StopOccurrence(trip_id=trip_id, position=position)
            )

    shape_rows: dict[str, list[tuple[int, GeoPoint]]] = {}
    for pt in tables.shapes:
        shape_rows.setdefault(pt.shape_id, []).append((pt.sequence, pt.location))
    shapes_by_id: dict[str, tuple[GeoPoint, ...]] = {}
    for shape_id, pts in shape_rows.items():
        pts.sort(key=lambda x: x[0])
        shapes_by_id[shape_id] = tuple(p for _, p in pts)

    fixed = frozenset(s for s in fixed_destination_stop_ids if s in stops_by_id)

    def _label(stop_id: str) -> str:
        stop = stops_by_id.get(stop_id)
        return stop.label if stop else stop_id

    planner_stop_ids = sorted(
        (sid for sid in occurrences if sid not in fixed),
        key=lambda sid: (collation_key(_label(sid)), _label(sid), sid),
    )

    logger.info(
        "Built schedule index: %d trips in scope, %d stops served, %d shapes",
        len(visits_by_trip),
        len(occurrences),
        len(shapes_by_id),
    )

    return ScheduleIndex(
        stops_by_id=stops_by_id,
        routes_by_id=routes_by_id,
        trips_by_id=trips_by_id,
        visits_by_trip=visits_by_trip,
        occurrences_by_stop={k: tuple(v) for k, v in occurrences.items()},
        shapes_by_id=shapes_by_id,
        scope_trip_ids=scope_trip_ids,
        planner_stop_ids=tuple(planner_stop_ids),
        fixed_destination_stop_ids=fixed,
        line_options=line_options(tables.routes),
    )
