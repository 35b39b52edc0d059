from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import GeoPoint


class IGeocoder(ABC):
    """Port for resolving a free-text place name to coordinates."""

    @abstractmethod
    async def geocode(self, query: str) -> GeoPoint | None:
        """Best match for `query`, or None if nothing was found.

        Raises GeocodingError when the lookup itself fails.
        """
