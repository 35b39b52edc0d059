from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union


@dataclass(frozen=True, slots=True)
class DirectOption:
    """Single-leg itinerary: board at the origin, alight at a target stop.

    Times are service-day seconds, already shifted by whole days when the
    fallback search wrapped a trip into the next day.
    """

    line: str
    target_stop_id: str
    trip_id: str
    departure_s: int
    arrival_s: int
    wait_minutes: int
    total_minutes: int
    fallback: bool = False

    @property
    def mode(self) -> Literal["direct"]:
        return "direct"


@dataclass(frozen=True, slots=True)
class TransferOption:
    """Two-leg itinerary via one transfer stop."""

    line1: str
    line2: str
    transfer_stop_id: str
    target_stop_id: str
    first_trip_id: str
    second_trip_id: str
    departure_s: int
    transfer_arrival_s: int
    second_departure_s: int
    arrival_s: int
    wait_minutes: int
    total_minutes: int
    fallback: bool = False

    @property
    def mode(self) -> Literal["transfer"]:
        return "transfer"


ItineraryOption = Union[DirectOption, TransferOption]


@dataclass(frozen=True, slots=True)
class BestRoute:
    origin_stop_id: str
    option: ItineraryOption

    @property
    def target_stop_id(self) -> str:
        return self.option.target_stop_id
