from __future__ import annotations

from pydantic import BaseModel

from src.adapters.api.schemas.planner import GeoPointSchema


class ServiceDaySchema(BaseModel):
    service_date: str
    weekday: str
    seconds_of_day: int
    used_fallback: bool


class VehicleSchema(BaseModel):
    trip_id: str
    route_id: str | None = None
    line: str
    headsign: str | None = None
    direction_id: int | None = None
    next_stop_id: str
    next_stop_name: str
    eta_minutes: int
    progress: float
    position: GeoPointSchema | None = None


class VehiclesResponseSchema(BaseModel):
    service_day: ServiceDaySchema
    vehicles: list[VehicleSchema]


class StopArrivalSchema(BaseModel):
    trip_id: str
    line: str
    headsign: str | None = None
    direction_id: int | None = None
    eta_minutes: int


class StopArrivalsSchema(BaseModel):
    stop_id: str
    stop_name: str
    arrivals: list[StopArrivalSchema]


class RouteShapeSchema(BaseModel):
    shape_id: str
    points: list[GeoPointSchema]


class RouteStopSchema(BaseModel):
    stop_id: str
    name: str
    location: GeoPointSchema
