from __future__ import annotations

import logging
import threading
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from src.app.ports.output import IGeocoder, IGtfsRepository
from src.domain.algorithms.geo_utils import nearest_stops
from src.domain.algorithms.itinerary_search import search
from src.domain.algorithms.result_cache import ItineraryCache
from src.domain.algorithms.schedule_index import (
    build_schedule_index,
    line_options,
    sorted_line_names,
)
from src.domain.algorithms.schedule_time import now_in_timezone
from src.domain.algorithms.service_calendar import resolve_service_day
from src.domain.exceptions import GeocodingError, PlaceNotFound, UnknownStop
from src.domain.models import (
    BestRoute,
    GeoPoint,
    GtfsTables,
    ItineraryOption,
    PlannerSettings,
    ScheduleIndex,
    ServiceDay,
    ServiceNow,
    Stop,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlannerState:
    """Everything derived from one dataset + line selection. Replaced, never mutated."""

    tables: GtfsTables
    selected_lines: tuple[str, ...]
    index: ScheduleIndex  # selected lines only
    search_index: ScheduleIndex  # same object unless search_scope == "all"
    displayed_service_ids: frozenset[str]


@dataclass(slots=True)
class TripPlannerService:
    """Owns the schedule indexes and the itinerary cache.

    - The dataset is loaded lazily from the GTFS repository on first use.
    - Changing the line filter or reloading builds a new state and swaps it in;
      requests already running keep the state they started with.
    - Every rebuild clears the itinerary cache.
    """

    gtfs_repository: IGtfsRepository
    settings: PlannerSettings = field(default_factory=PlannerSettings)
    geocoder: IGeocoder | None = None

    _state: PlannerState | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _cache: ItineraryCache[list[ItineraryOption]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._cache = ItineraryCache(capacity=self.settings.cache_capacity)

    # -- dataset & filter -------------------------------------------------

    @property
    def state(self) -> PlannerState:
        current = self._state
        if current is None:
            current = self.load()
        return current

    @property
    def index(self) -> ScheduleIndex:
        return self.state.index

    @property
    def search_index(self) -> ScheduleIndex:
        return self.state.search_index

    @property
    def cache(self) -> ItineraryCache[list[ItineraryOption]]:
        return self._cache

    @property
    def timezone(self) -> str:
        return self.state.tables.timezone or self.settings.default_timezone

    @property
    def line_options(self) -> tuple[str, ...]:
        return self.state.index.line_options

    @property
    def selected_lines(self) -> tuple[str, ...]:
        return self.state.selected_lines

    def load(self) -> PlannerState:
        tables = self.gtfs_repository.load_tables()
        return self.reload(tables)

    def reload(self, tables: GtfsTables) -> PlannerState:
        with self._lock:
            previous = self._state
            wanted: Iterable[str] = previous.selected_lines if previous else ()
            lines = self._resolve_selection(line_options(tables.routes), wanted)
            state = self._build_state(tables, lines)
            self._state = state
            self._cache.clear()
        logger.info(
            "Loaded GTFS dataset: %d routes, %d trips, %d stops; lines %s",
            len(tables.routes),
            len(tables.trips),
            len(tables.stops),
            ",".join(lines) or "-",
        )
        return state

    def select_lines(self, lines: Iterable[str]) -> tuple[str, ...]:
        """Apply a new line filter. Unknown lines are ignored; an empty pick
        falls back to the configured initial lines."""

        current = self.state
        with self._lock:
            tables = (self._state or current).tables
            selected = self._resolve_selection(line_options(tables.routes), lines)
            self._state = self._build_state(tables, selected)
            self._cache.clear()
        logger.info("Line filter set to %s", ",".join(selected) or "-")
        return selected

    def _resolve_selection(
        self, options: tuple[str, ...], wanted: Iterable[str]
    ) -> tuple[str, ...]:
        picked = [line for line in wanted if line in options]
        if not picked:
            picked = [line for line in self.settings.initial_lines if line in options]
        if not picked and options:
            picked = [options[0]]
        return sorted_line_names(picked)

    def _build_state(
        self, tables: GtfsTables, selected_lines: tuple[str, ...]
    ) -> PlannerState:
        selected = set(selected_lines)
        route_ids = {
            r.route_id
            for r in tables.routes
            if (r.short_name or "").strip() in selected
        }
        fixed = self.settings.fixed_destination_stop_ids

        index = build_schedule_index(
            tables, route_ids=route_ids, fixed_destination_stop_ids=fixed
        )
        if self.settings.search_scope == "all":
            search_index = build_schedule_index(
                tables, route_ids=None, fixed_destination_stop_ids=fixed
            )
        else:
            search_index = index

        displayed_service_ids = frozenset(
            t.service_id for t in tables.trips if t.route_id in route_ids
        )
        return PlannerState(
            tables=tables,
            selected_lines=selected_lines,
            index=index,
            search_index=search_index,
            displayed_service_ids=displayed_service_ids,
        )

    # -- clock & calendar -------------------------------------------------

    def now(self, at: datetime | None = None) -> ServiceNow:
        return now_in_timezone(self.timezone, at)

    def service_day(self, now: ServiceNow | None = None) -> ServiceDay:
        """Active services/trips for `now` (defaults to the wall clock)."""

        state = self.state
        now = now or self.now()
        return resolve_service_day(
            state.tables.calendar,
            state.tables.calendar_dates,
            state.tables.trips,
            now,
            fallback_service_ids=state.displayed_service_ids,
        )

    # -- stops ------------------------------------------------------------

    def planner_stops(self) -> list[Stop]:
        index = self.search_index
        return [
            index.stops_by_id[sid]
            for sid in index.planner_stop_ids
            if sid in index.stops_by_id
        ]

    def fixed_destination_stop_ids(self) -> tuple[str, ...]:
        present = self.search_index.fixed_destination_stop_ids
        configured = self.settings.fixed_destination_stop_ids
        return tuple(s for s in configured if s in present)

    def nearest_planner_stops(
        self, point: GeoPoint, limit: int | None = None
    ) -> list[tuple[Stop, float]]:
        index = self.search_index
        return nearest_stops(
            index.stops_by_id,
            index.planner_stop_ids,
            point=point,
            limit=self.settings.nearest_stops_limit if limit is None else limit,
        )

    # -- itineraries ------------------------------------------------------

    def plan(
        self,
        origin_stop_id: str,
        target_stop_ids: Collection[str],
        *,
        day: ServiceDay | None = None,
    ) -> list[ItineraryOption]:
        """Ranked itineraries from one origin stop to any of the targets.

        Results are cached per (origin, targets, service date, minute of `day.now`).
        """

        index = self.search_index
        if origin_stop_id not in index.stops_by_id:
            raise UnknownStop(f"Unknown stop: {origin_stop_id}")
        targets = frozenset(target_stop_ids)
        if not targets:
            return []

        day = day or self.service_day()
        now_s = day.now.seconds_of_day
        return self._cache.get_or_compute(
            now_s,
            origin_stop_id,
            targets,
            lambda: search(
                index,
                now_s,
                origin_stop_id,
                targets,
                active_trip_ids=day.active_trip_ids,
                settings=self.settings,
            ),
            service_date=day.now.service_date,
        )

    def best_route(
        self,
        origin_stop_ids: Iterable[str],
        target_stop_ids: Collection[str],
        *,
        day: ServiceDay | None = None,
    ) -> BestRoute | None:
        """Best first-ranked option over several candidate origin stops."""

        day = day or self.service_day()
        best: BestRoute | None = None
        for origin in origin_stop_ids:
            options = self.plan(origin, target_stop_ids, day=day)
            if not options:
                continue
            option = options[0]
            if best is None or option.total_minutes < best.option.total_minutes:
                best = BestRoute(origin_stop_id=origin, option=option)
        return best

    def best_route_from_location(
        self,
        point: GeoPoint,
        target_stop_ids: Collection[str] | None = None,
        *,
        day: ServiceDay | None = None,
    ) -> BestRoute | None:
        targets = (
            self.fixed_destination_stop_ids()
            if target_stop_ids is None
            else target_stop_ids
        )
        origins = [stop.id for stop, _ in self.nearest_planner_stops(point)]
        return self.best_route(origins, targets, day=day)

    async def best_route_to_place(
        self,
        point: GeoPoint,
        query: str,
        *,
        day: ServiceDay | None = None,
    ) -> tuple[tuple[str, ...], BestRoute | None]:
        """Geocode `query`, then route from `point` to the stops nearest to it.

        Returns (target stop ids, best route or None). Raises GeocodingError
        when the lookup fails and PlaceNotFound when it yields nothing usable.
        """

        if self.geocoder is None:
            raise GeocodingError("Geocoder not configured")

        place = await self.geocoder.geocode(query)
        if place is None:
            raise PlaceNotFound(f"Place not found: {query}")

        targets = tuple(stop.id for stop, _ in self.nearest_planner_stops(place))
        if not targets:
            raise PlaceNotFound(f"No stops near: {query}")

        return targets, self.best_route_from_location(point, targets, day=day)
