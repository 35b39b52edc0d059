from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    @classmethod
    def parse(cls, lat: object, lon: object) -> GeoPoint | None:
        """Build a point from raw table values, or None if they are not usable."""

        try:
            lat_f = float(lat)  # type: ignore[arg-type]
            lon_f = float(lon)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
            return None
        try:
            return cls(lat=lat_f, lon=lon_f)
        except ValueError:
            return None

    def towards(self, other: GeoPoint, fraction: float) -> GeoPoint:
        """Linear interpolation between two points (fraction 0 -> self, 1 -> other)."""

        return GeoPoint(
            lat=self.lat + (other.lat - self.lat) * fraction,
            lon=self.lon + (other.lon - self.lon) * fraction,
        )
