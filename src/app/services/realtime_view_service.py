from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass

from src.app.services.trip_planner_service import TripPlannerService
from src.domain.algorithms.schedule_index import collation_key
from src.domain.algorithms.schedule_time import minutes_ceil
from src.domain.algorithms.vehicle_position import estimate_position
from src.domain.models.geo import GeoPoint
from src.domain.models.realtime import (
    DestinationArrivals,
    ScheduledVehicle,
    StopArrival,
)
from src.domain.models.schedule import ServiceDay
from src.domain.models.stop import Stop


@dataclass(slots=True)
class RealtimeViewService:
    """Supports the live map view, from the static schedule only.

    - Vehicles in progress on the selected lines, positioned by interpolation.
    - Upcoming arrivals per stop and at the fixed destinations.
    - Representative shape polylines and stops of the selected lines.
    """

    planner: TripPlannerService

    def active_vehicles(self, day: ServiceDay) -> tuple[ScheduledVehicle, ...]:
        index = self.planner.index
        now_s = day.now.seconds_of_day

        out: list[ScheduledVehicle] = []
        for trip_id, visits in index.visits_by_trip.items():
            trip = index.trips_by_id.get(trip_id)
            if trip is None or trip.service_id not in day.active_service_ids:
                continue

            first_s = visits[0].departure_or_arrival_s
            last_s = visits[-1].arrival_or_departure_s
            if first_s is None or last_s is None:
                continue
            if now_s < first_s or now_s > last_s:
                continue

            next_visit = visits[-1]
            for visit in visits:
                t = visit.arrival_or_departure_s
                if t is not None and t >= now_s:
                    next_visit = visit
                    break
            next_s = next_visit.arrival_or_departure_s
            eta = max(0, minutes_ceil(next_s - now_s)) if next_s is not None else 0
            progress = max(0.0, min(1.0, (now_s - first_s) / max(1, last_s - first_s)))

            out.append(
                ScheduledVehicle(
                    trip_id=trip_id,
                    route_id=trip.route_id,
                    line=index.line_for_trip(trip_id),
                    headsign=trip.headsign,
                    direction_id=trip.direction_id,
                    next_stop_id=next_visit.stop_id,
                    next_stop_name=index.stop_label(next_visit.stop_id),
                    eta_minutes=eta,
                    progress=progress,
                    position=estimate_position(visits, now_s, index.stops_by_id),
                )
            )

        out.sort(key=lambda v: v.eta_minutes)
        return tuple(out)

    def upcoming_by_stop(self, day: ServiceDay) -> dict[str, tuple[StopArrival, ...]]:
        """Arrivals within the upcoming window on the selected lines, per stop."""

        index = self.planner.index
        now_s = day.now.seconds_of_day
        horizon_s = now_s + self.planner.settings.upcoming_window_minutes * 60

        by_stop: dict[str, list[StopArrival]] = {}
        for trip_id, visits in index.visits_by_trip.items():
            trip = index.trips_by_id.get(trip_id)
            if trip is None or trip.service_id not in day.active_service_ids:
                continue
            line = index.line_for_trip(trip_id)
            for visit in visits:
                arr_s = visit.arrival_or_departure_s
                if arr_s is None or arr_s < now_s or arr_s > horizon_s:
                    continue
                by_stop.setdefault(visit.stop_id, []).append(
                    StopArrival(
                        trip_id=trip_id,
                        line=line,
                        headsign=trip.headsign,
                        direction_id=trip.direction_id,
                        eta_minutes=max(0, minutes_ceil(arr_s - now_s)),
                    )
                )

        return {
            stop_id: tuple(sorted(items, key=lambda a: a.eta_minutes))
            for stop_id, items in by_stop.items()
        }

    def arrivals_at(
        self, stop_id: str, day: ServiceDay, *, limit: int | None = None
    ) -> tuple[StopArrival, ...]:
        items = self.upcoming_by_stop(day).get(stop_id, ())
        return items if limit is None else items[: max(0, limit)]

    def fixed_destination_summary(
        self, day: ServiceDay, *, per_stop: int = 3
    ) -> tuple[DestinationArrivals, ...]:
        """Next arrivals at each fixed destination, soonest destination first."""

        index = self.planner.index
        upcoming = self.upcoming_by_stop(day)
        rows = [
            DestinationArrivals(
                stop_id=stop_id,
                stop_name=index.stop_label(stop_id),
                arrivals=upcoming.get(stop_id, ())[:per_stop],
            )
            for stop_id in self.planner.settings.fixed_destination_stop_ids
            if stop_id in index.stops_by_id
        ]

        def _first_eta(row: DestinationArrivals) -> float:
            return row.arrivals[0].eta_minutes if row.arrivals else math.inf

        rows.sort(key=_first_eta)
        return tuple(rows)

    def route_shapes(
        self, *, max_shapes: int | None = None
    ) -> tuple[tuple[str, tuple[GeoPoint, ...]], ...]:
        """Most used shapes of the selected lines.

        Without shapes, falls back to the stop sequence of the first trip.
        """

        index = self.planner.index
        settings = self.planner.settings
        limit = settings.max_shapes_to_draw if max_shapes is None else max_shapes

        shape_counts: Counter[str] = Counter()
        for trip_id in index.scope_trip_ids:
            trip = index.trips_by_id.get(trip_id)
            if trip is None or not trip.shape_id:
                continue
            if trip.shape_id not in index.shapes_by_id:
                continue
            shape_counts[trip.shape_id] += 1

        chosen: list[tuple[str, tuple[GeoPoint, ...]]] = []
        for shape_id, _ in shape_counts.most_common(limit):
            pts = index.shapes_by_id.get(shape_id)
            if not pts or len(pts) < 2:
                continue
            chosen.append((shape_id, pts))

        if not shape_counts and index.scope_trip_ids:
            first_trip = index.scope_trip_ids[0]
            pts = tuple(
                stop.location
                for stop in (
                    index.stops_by_id.get(v.stop_id)
                    for v in index.visits_by_trip.get(first_trip, ())
                )
                if stop is not None and stop.location is not None
            )
            if len(pts) > 1:
                chosen.append((f"trip:{first_trip}", pts))

        return tuple(chosen)

    def route_stops(self) -> tuple[Stop, ...]:
        """Unique stops served by the selected lines, for map markers."""

        index = self.planner.index
        stop_ids: set[str] = set()
        for visits in index.visits_by_trip.values():
            stop_ids.update(v.stop_id for v in visits)

        stops = [
            s
            for s in (index.stops_by_id.get(sid) for sid in stop_ids)
            if s is not None and s.location is not None
        ]
        stops.sort(key=lambda s: (collation_key(s.label), s.id))
        return tuple(stops)
