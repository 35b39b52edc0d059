from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models.gtfs import GtfsTables


class IGtfsRepository(ABC):
    """Port for loading a static GTFS dataset as typed tables."""

    @abstractmethod
    def load_tables(self) -> GtfsTables:
        """Return the dataset; raise FeedLoadError if a mandatory table is missing."""
