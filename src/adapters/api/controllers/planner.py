from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import get_trip_planner_service
from src.adapters.api.schemas.planner import (
    BestRouteSchema,
    FromLocationRequestSchema,
    GeoPointSchema,
    ItineraryOptionSchema,
    LinesSchema,
    LinesUpdateSchema,
    NearestStopSchema,
    StopSchema,
    ToPlaceRequestSchema,
    ToPlaceResponseSchema,
)
from src.app.services.trip_planner_service import TripPlannerService
from src.domain.algorithms.schedule_time import format_hms
from src.domain.models import (
    BestRoute,
    DirectOption,
    GeoPoint,
    ItineraryOption,
    ScheduleIndex,
    ServiceDay,
    Stop,
)

router = APIRouter(tags=["planner"])


def _point(p: GeoPoint | None) -> GeoPointSchema | None:
    return GeoPointSchema(lat=p.lat, lon=p.lon) if p else None


def _stop_to_schema(stop: Stop) -> StopSchema:
    return StopSchema(stop_id=stop.id, name=stop.label, location=_point(stop.location))


def _option_to_schema(
    option: ItineraryOption, index: ScheduleIndex
) -> ItineraryOptionSchema:
    common = dict(
        mode=option.mode,
        fallback=option.fallback,
        target_stop_id=option.target_stop_id,
        target_stop_name=index.stop_label(option.target_stop_id),
        departure_s=option.departure_s,
        arrival_s=option.arrival_s,
        departure_time=format_hms(option.departure_s),
        arrival_time=format_hms(option.arrival_s),
        wait_minutes=option.wait_minutes,
        total_minutes=option.total_minutes,
    )
    if isinstance(option, DirectOption):
        return ItineraryOptionSchema(
            lines=[option.line], trip_ids=[option.trip_id], **common
        )
    return ItineraryOptionSchema(
        lines=[option.line1, option.line2],
        trip_ids=[option.first_trip_id, option.second_trip_id],
        transfer_stop_id=option.transfer_stop_id,
        transfer_stop_name=index.stop_label(option.transfer_stop_id),
        transfer_arrival_time=format_hms(option.transfer_arrival_s),
        second_departure_time=format_hms(option.second_departure_s),
        **common,
    )


def _best_to_schema(best: BestRoute, index: ScheduleIndex) -> BestRouteSchema:
    return BestRouteSchema(
        origin_stop_id=best.origin_stop_id,
        origin_stop_name=index.stop_label(best.origin_stop_id),
        option=_option_to_schema(best.option, index),
    )


def _service_day(service: TripPlannerService, at: datetime | None) -> ServiceDay:
    return service.service_day(service.now(at) if at else None)


@router.get("/lines", response_model=LinesSchema)
def get_lines(
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> LinesSchema:
    return LinesSchema(
        options=list(service.line_options), selected=list(service.selected_lines)
    )


@router.put("/lines", response_model=LinesSchema)
def put_lines(
    req: LinesUpdateSchema,
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> LinesSchema:
    selected = service.select_lines(req.lines)
    return LinesSchema(options=list(service.line_options), selected=list(selected))


@router.get("/stops", response_model=list[StopSchema])
def list_planner_stops(
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> list[StopSchema]:
    return [_stop_to_schema(s) for s in service.planner_stops()]


@router.get("/stops/nearest", response_model=list[NearestStopSchema])
def list_nearest_stops(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    limit: int | None = Query(default=None, ge=1, le=100),
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> list[NearestStopSchema]:
    nearest = service.nearest_planner_stops(GeoPoint(lat=lat, lon=lon), limit=limit)
    return [
        NearestStopSchema(
            stop_id=stop.id,
            name=stop.label,
            location=_point(stop.location),
            distance_m=distance_m,
        )
        for stop, distance_m in nearest
    ]


@router.get("/itineraries", response_model=list[ItineraryOptionSchema])
def list_itineraries(
    origin: str,
    target: list[str] | None = Query(default=None),
    at: datetime | None = None,
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> list[ItineraryOptionSchema]:
    targets = target if target else service.fixed_destination_stop_ids()
    options = service.plan(origin, targets, day=_service_day(service, at))
    index = service.search_index
    return [_option_to_schema(o, index) for o in options]


@router.post("/itineraries/from-location", response_model=BestRouteSchema | None)
def best_from_location(
    req: FromLocationRequestSchema,
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> BestRouteSchema | None:
    point = GeoPoint(lat=req.origin.lat, lon=req.origin.lon)
    best = service.best_route_from_location(
        point, req.target_stop_ids, day=_service_day(service, req.at)
    )
    return _best_to_schema(best, service.search_index) if best else None


@router.post("/itineraries/to-place", response_model=ToPlaceResponseSchema)
async def best_to_place(
    req: ToPlaceRequestSchema,
    service: TripPlannerService = Depends(get_trip_planner_service),
) -> ToPlaceResponseSchema:
    point = GeoPoint(lat=req.origin.lat, lon=req.origin.lon)
    targets, best = await service.best_route_to_place(
        point, req.query, day=_service_day(service, req.at)
    )
    return ToPlaceResponseSchema(
        target_stop_ids=list(targets),
        best=_best_to_schema(best, service.search_index) if best else None,
    )
