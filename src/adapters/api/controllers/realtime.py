from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import get_realtime_view_service
from src.adapters.api.schemas.planner import GeoPointSchema
from src.adapters.api.schemas.realtime import (
    RouteShapeSchema,
    RouteStopSchema,
    ServiceDaySchema,
    StopArrivalSchema,
    StopArrivalsSchema,
    VehicleSchema,
    VehiclesResponseSchema,
)
from src.app.services.realtime_view_service import RealtimeViewService
from src.domain.exceptions import UnknownStop
from src.domain.models import ServiceDay, StopArrival

router = APIRouter(prefix="/realtime", tags=["realtime"])


def _day(service: RealtimeViewService, at: datetime | None) -> ServiceDay:
    planner = service.planner
    return planner.service_day(planner.now(at) if at else None)


def _arrival_to_schema(a: StopArrival) -> StopArrivalSchema:
    return StopArrivalSchema(
        trip_id=a.trip_id,
        line=a.line,
        headsign=a.headsign,
        direction_id=a.direction_id,
        eta_minutes=a.eta_minutes,
    )


@router.get("/vehicles", response_model=VehiclesResponseSchema)
def list_vehicles(
    at: datetime | None = None,
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> VehiclesResponseSchema:
    day = _day(service, at)
    vehicles = service.active_vehicles(day)

    return VehiclesResponseSchema(
        service_day=ServiceDaySchema(
            service_date=day.now.service_date,
            weekday=day.now.weekday,
            seconds_of_day=day.now.seconds_of_day,
            used_fallback=day.used_fallback,
        ),
        vehicles=[
            VehicleSchema(
                trip_id=v.trip_id,
                route_id=v.route_id,
                line=v.line,
                headsign=v.headsign,
                direction_id=v.direction_id,
                next_stop_id=v.next_stop_id,
                next_stop_name=v.next_stop_name,
                eta_minutes=v.eta_minutes,
                progress=v.progress,
                position=(
                    GeoPointSchema(lat=v.position.lat, lon=v.position.lon)
                    if v.position
                    else None
                ),
            )
            for v in vehicles
        ],
    )


@router.get("/stops/{stop_id}/arrivals", response_model=StopArrivalsSchema)
def list_stop_arrivals(
    stop_id: str,
    limit: int | None = Query(default=None, ge=1, le=100),
    at: datetime | None = None,
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> StopArrivalsSchema:
    index = service.planner.index
    if stop_id not in index.stops_by_id:
        raise UnknownStop(f"Unknown stop: {stop_id}")

    arrivals = service.arrivals_at(stop_id, _day(service, at), limit=limit)
    return StopArrivalsSchema(
        stop_id=stop_id,
        stop_name=index.stop_label(stop_id),
        arrivals=[_arrival_to_schema(a) for a in arrivals],
    )


@router.get("/destinations", response_model=list[StopArrivalsSchema])
def list_destination_arrivals(
    at: datetime | None = None,
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> list[StopArrivalsSchema]:
    return [
        StopArrivalsSchema(
            stop_id=row.stop_id,
            stop_name=row.stop_name,
            arrivals=[_arrival_to_schema(a) for a in row.arrivals],
        )
        for row in service.fixed_destination_summary(_day(service, at))
    ]


@router.get("/shapes", response_model=list[RouteShapeSchema])
def list_route_shapes(
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> list[RouteShapeSchema]:
    return [
        RouteShapeSchema(
            shape_id=shape_id,
            points=[GeoPointSchema(lat=p.lat, lon=p.lon) for p in pts],
        )
        for shape_id, pts in service.route_shapes()
    ]


@router.get("/stops", response_model=list[RouteStopSchema])
def list_route_stops(
    service: RealtimeViewService = Depends(get_realtime_view_service),
) -> list[RouteStopSchema]:
    return [
        RouteStopSchema(
            stop_id=s.id,
            name=s.label,
            location=GeoPointSchema(lat=s.location.lat, lon=s.location.lon),
        )
        for s in service.route_stops()
        if s.location is not None
    ]
