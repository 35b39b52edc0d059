from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SearchScope = Literal["filtered", "all"]


@dataclass(frozen=True, slots=True)
class PlannerSettings:
    """Tuning knobs for the planner and the schedule views."""

    # Itinerary search
    planner_window_minutes: int = 720
    fallback_horizon_hours: int = 36
    min_transfer_seconds: int = 120
    max_transfer_stops_from_origin: int = 16
    max_leg_candidates: int = 20
    max_second_leg_events: int = 14
    max_planner_results: int = 10
    transfer_dedup_bucket_s: int = 300
    cache_capacity: int = 120

    # Whether itineraries may use lines outside the current line filter.
    search_scope: SearchScope = "filtered"

    # Schedule views
    upcoming_window_minutes: int = 120
    max_shapes_to_draw: int = 4
    nearest_stops_limit: int = 8

    # Dataset specifics
    initial_lines: tuple[str, ...] = ("470",)
    fixed_destination_stop_ids: tuple[str, ...] = ("7276", "7346")
    default_timezone: str = "Atlantic/Canary"

    def __post_init__(self) -> None:
        if self.search_scope not in ("filtered", "all"):
            raise ValueError(f"Invalid search scope: {self.search_scope}")
        if self.cache_capacity < 1:
            raise ValueError("cache_capacity must be >= 1")
