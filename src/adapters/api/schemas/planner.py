from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class LinesSchema(BaseModel):
    options: list[str]
    selected: list[str]


class LinesUpdateSchema(BaseModel):
    lines: list[str] = []


class StopSchema(BaseModel):
    stop_id: str
    name: str
    location: GeoPointSchema | None = None


class NearestStopSchema(StopSchema):
    distance_m: float


class ItineraryOptionSchema(BaseModel):
    mode: Literal["direct", "transfer"]
    fallback: bool = False

    lines: list[str]
    trip_ids: list[str]
    target_stop_id: str
    target_stop_name: str
    transfer_stop_id: str | None = None
    transfer_stop_name: str | None = None

    departure_s: int
    arrival_s: int
    departure_time: str
    arrival_time: str
    transfer_arrival_time: str | None = None
    second_departure_time: str | None = None

    wait_minutes: int
    total_minutes: int


class BestRouteSchema(BaseModel):
    origin_stop_id: str
    origin_stop_name: str
    option: ItineraryOptionSchema


class FromLocationRequestSchema(BaseModel):
    origin: GeoPointSchema
    # None -> the fixed destinations
    target_stop_ids: list[str] | None = None
    at: datetime | None = None


class ToPlaceRequestSchema(BaseModel):
    origin: GeoPointSchema
    query: str = Field(..., min_length=1)
    at: datetime | None = None


class ToPlaceResponseSchema(BaseModel):
    target_stop_ids: list[str]
    best: BestRouteSchema | None = None
