from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, replace

from src.domain.algorithms.departures import candidate_departures_at
from src.domain.algorithms.schedule_time import minutes_ceil, wrap_forward
from src.domain.models.gtfs import StopVisit
from src.domain.models.itinerary import DirectOption, ItineraryOption, TransferOption
from src.domain.models.planner import PlannerSettings
from src.domain.models.schedule import ScheduleIndex


@dataclass(frozen=True, slots=True)
class TargetHit:
    stop_id: str
    position: int
    arrival_s: int


def find_next_target(
    visits: Sequence[StopVisit], from_position: int, targets: Collection[str]
) -> TargetHit | None:
    """First visit at or after `from_position` whose stop is a target."""

    for i in range(max(0, from_position), len(visits)):
        visit = visits[i]
        if visit.stop_id not in targets:
            continue
        arr_s = visit.arrival_or_departure_s
        if arr_s is None:
            continue
        return TargetHit(stop_id=visit.stop_id, position=i, arrival_s=arr_s)
    return None


def rank_options(options: list[ItineraryOption]) -> list[ItineraryOption]:
    return sorted(options, key=lambda o: (o.total_minutes, o.departure_s))


def search_pass(
    index: ScheduleIndex,
    now_s: int,
    origin_stop_id: str,
    target_stop_ids: Collection[str],
    *,
    active_trip_ids: Collection[str],
    settings: PlannerSettings,
    strict_service: bool = True,
    wrap_to_next_day: bool = False,
) -> list[ItineraryOption]:
    """Bounded search for direct and one-transfer itineraries.

    Not an exhaustive shortest path search: candidates are capped at each stage
    and the scan stops once `max_planner_results` options are collected.
    """

    targets = frozenset(target_stop_ids)
    if not targets:
        return []

    if wrap_to_next_day:
        horizon_s = now_s + settings.fallback_horizon_hours * 3600
    else:
        horizon_s = now_s + settings.planner_window_minutes * 60

    def _shift(seconds: int, floor_s: int) -> int:
        return wrap_forward(seconds, floor_s) if wrap_to_next_day else seconds

    first_legs = candidate_departures_at(
        index,
        origin_stop_id,
        now_s,
        active_trip_ids=active_trip_ids,
        strict_service=strict_service,
        wrap_to_next_day=wrap_to_next_day,
        max_s=horizon_s,
        limit=settings.max_leg_candidates,
    )

    out: list[ItineraryOption] = []
    seen: set[tuple] = set()

    def _full() -> bool:
        return len(out) >= settings.max_planner_results

    for leg1 in first_legs:
        if leg1.trip_id not in index.trips_by_id:
            continue
        visits1 = index.visits_by_trip.get(leg1.trip_id, ())
        line1 = index.line_for_trip(leg1.trip_id)
        dep1_s = leg1.departure_s
        wait_minutes = minutes_ceil(dep1_s - now_s)

        # 1) Direct: first target reached by the boarded trip.
        direct = find_next_target(visits1, leg1.position + 1, targets)
        if direct is not None:
            arr_s = _shift(direct.arrival_s, dep1_s)
            key = ("D", line1, direct.stop_id)
            if arr_s >= dep1_s and key not in seen:
                seen.add(key)
                out.append(
                    DirectOption(
                        line=line1,
                        target_stop_id=direct.stop_id,
                        trip_id=leg1.trip_id,
                        departure_s=dep1_s,
                        arrival_s=arr_s,
                        wait_minutes=wait_minutes,
                        total_minutes=minutes_ceil(arr_s - now_s),
                    )
                )
                if _full():
                    break

        # 2) One transfer at any of the next stops of the boarded trip.
        last_position = min(
            len(visits1) - 1, leg1.position + settings.max_transfer_stops_from_origin
        )
        for i in range(leg1.position + 1, last_position + 1):
            transfer_visit = visits1[i]
            if transfer_visit.stop_id in targets:
                continue
            arrive_s = transfer_visit.arrival_or_departure_s
            if arrive_s is None:
                continue
            arrive_s = _shift(arrive_s, dep1_s)
            if arrive_s < dep1_s or arrive_s >= horizon_s:
                continue

            second_legs = candidate_departures_at(
                index,
                transfer_visit.stop_id,
                arrive_s + settings.min_transfer_seconds,
                active_trip_ids=active_trip_ids,
                strict_service=strict_service,
                wrap_to_next_day=wrap_to_next_day,
                max_s=horizon_s,
                limit=settings.max_second_leg_events,
                exclude_trip_ids=frozenset({leg1.trip_id}),
            )
            for leg2 in second_legs:
                if leg2.trip_id not in index.trips_by_id:
                    continue
                hit = find_next_target(
                    index.visits_by_trip.get(leg2.trip_id, ()),
                    leg2.position + 1,
                    targets,
                )
                if hit is None:
                    continue
                arr2_s = _shift(hit.arrival_s, leg2.departure_s)
                if arr2_s < leg2.departure_s:
                    continue

                line2 = index.line_for_trip(leg2.trip_id)
                key = (
                    "T",
                    line1,
                    line2,
                    hit.stop_id,
                    leg2.departure_s // settings.transfer_dedup_bucket_s,
                )
                if key in seen:
                    continue
                seen.add(key)
                out.append(
                    TransferOption(
                        line1=line1,
                        line2=line2,
                        transfer_stop_id=transfer_visit.stop_id,
                        target_stop_id=hit.stop_id,
                        first_trip_id=leg1.trip_id,
                        second_trip_id=leg2.trip_id,
                        departure_s=dep1_s,
                        transfer_arrival_s=arrive_s,
                        second_departure_s=leg2.departure_s,
                        arrival_s=arr2_s,
                        wait_minutes=wait_minutes,
                        total_minutes=minutes_ceil(arr2_s - now_s),
                    )
                )
                if _full():
                    break
            if _full():
                break
        if _full():
            break

    return rank_options(out)


def search(
    index: ScheduleIndex,
    now_s: int,
    origin_stop_id: str,
    target_stop_ids: Collection[str],
    *,
    active_trip_ids: Collection[str],
    settings: PlannerSettings,
) -> list[ItineraryOption]:
    """Strict pass first; if it finds nothing, a relaxed pass tagged `fallback`.

    The relaxed pass ignores the active-service filter and lets clock values
    wrap into the next day, so results may not match today's real service.
    """

    strict = search_pass(
        index,
        now_s,
        origin_stop_id,
        target_stop_ids,
        active_trip_ids=active_trip_ids,
        settings=settings,
        strict_service=True,
        wrap_to_next_day=False,
    )
    if strict:
        return strict

    relaxed = search_pass(
        index,
        now_s,
        origin_stop_id,
        target_stop_ids,
        active_trip_ids=active_trip_ids,
        settings=settings,
        strict_service=False,
        wrap_to_next_day=True,
    )
    return [replace(o, fallback=True) for o in relaxed]
