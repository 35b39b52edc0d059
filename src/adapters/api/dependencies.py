from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from src.adapters.config import planner_settings_from_env
from src.adapters.geocoding.nominatim_geocoder import NominatimGeocoder
from src.adapters.persistence import LocalGtfsRepository
from src.app.services.realtime_view_service import RealtimeViewService
from src.app.services.trip_planner_service import TripPlannerService


@lru_cache(maxsize=1)
def get_trip_planner_service() -> TripPlannerService:
    # One instance per process: it holds the loaded dataset, the line filter
    # and the itinerary cache.
    return TripPlannerService(
        gtfs_repository=LocalGtfsRepository(),
        settings=planner_settings_from_env(),
        geocoder=NominatimGeocoder(),
    )


def get_realtime_view_service(
    planner: TripPlannerService = Depends(get_trip_planner_service),
) -> RealtimeViewService:
    return RealtimeViewService(planner=planner)
