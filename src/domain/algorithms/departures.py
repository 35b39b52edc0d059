from __future__ import annotations

from collections.abc import Collection

from src.domain.algorithms.schedule_time import wrap_forward
from src.domain.models.schedule import DepartureEvent, ScheduleIndex

DEFAULT_HORIZON_S = 6 * 3600


def candidate_departures_at(
    index: ScheduleIndex,
    stop_id: str,
    earliest_s: int,
    *,
    active_trip_ids: Collection[str] = frozenset(),
    strict_service: bool = True,
    wrap_to_next_day: bool = False,
    max_s: int | None = None,
    limit: int = 20,
    exclude_trip_ids: Collection[str] = (),
) -> list[DepartureEvent]:
    """Upcoming departures at a stop, earliest first.

    - strict_service: only trips in `active_trip_ids`.
    - wrap_to_next_day: clock values earlier than `earliest_s` are moved forward
      by whole days (a trip that ran "yesterday" by clock is boardable again).
    - Departures with an unparseable time are skipped.
    """

    horizon = max_s if max_s is not None else earliest_s + DEFAULT_HORIZON_S

    out: list[DepartureEvent] = []
    for occ in index.occurrences_by_stop.get(stop_id, ()):
        if occ.trip_id in exclude_trip_ids:
            continue
        if strict_service and occ.trip_id not in active_trip_ids:
            continue
        visits = index.visits_by_trip.get(occ.trip_id)
        if not visits:
            continue

        dep_s = visits[occ.position].departure_or_arrival_s
        if dep_s is None:
            continue
        if wrap_to_next_day:
            dep_s = wrap_forward(dep_s, earliest_s)
        if dep_s < earliest_s or dep_s > horizon:
            continue

        out.append(
            DepartureEvent(
                trip_id=occ.trip_id, position=occ.position, departure_s=dep_s
            )
        )

    out.sort(key=lambda ev: ev.departure_s)
    return out[: max(0, int(limit))]
