from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import httpx

from src.app.ports.output import IGeocoder
from src.domain.exceptions import GeocodingError
from src.domain.models import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NominatimGeocoder(IGeocoder):
    """Resolves place names with a Nominatim-compatible search endpoint.

    Env vars:
      - GEOCODER_URL: search endpoint (default: public Nominatim)
      - GEOCODER_QUERY_SUFFIX: appended to every query (default ", Tenerife")
      - GEOCODER_COUNTRY_CODES: countrycodes filter (default "es")
      - GEOCODER_TIMEOUT_S: request timeout (default 10)
      - GEOCODER_USER_AGENT: User-Agent header (Nominatim requires one)

    Notes:
      - Only the first result is used.
      - `transport` is for tests (httpx.MockTransport).
    """

    url: str | None = None
    query_suffix: str | None = None
    country_codes: str | None = None
    timeout_s: float = 10.0
    user_agent: str | None = None
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv(
                "GEOCODER_URL", "https://nominatim.openstreetmap.org/search"
            )
        if self.query_suffix is None:
            self.query_suffix = os.getenv("GEOCODER_QUERY_SUFFIX", ", Tenerife")
        if self.country_codes is None:
            self.country_codes = os.getenv("GEOCODER_COUNTRY_CODES", "es")
        if os.getenv("GEOCODER_TIMEOUT_S"):
            self.timeout_s = float(os.environ["GEOCODER_TIMEOUT_S"])
        if self.user_agent is None:
            self.user_agent = os.getenv("GEOCODER_USER_AGENT", "gtfs-trip-planner")

    def _params(self, query: str) -> dict[str, str]:
        params = {
            "format": "json",
            "limit": "1",
            "q": f"{query.strip()}{self.query_suffix or ''}",
        }
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        return params

    async def geocode(self, query: str) -> GeoPoint | None:
        if not query.strip():
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(
                    self.url or "",
                    params=self._params(query),
                    headers={"User-Agent": self.user_agent or ""},
                )
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Geocoding failed for %r: %s", query, exc)
            raise GeocodingError(f"Place lookup failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodingError("Place lookup returned invalid JSON") from exc

        if not isinstance(payload, list) or not payload:
            return None
        first = payload[0]
        if not isinstance(first, dict):
            return None
        return GeoPoint.parse(first.get("lat"), first.get("lon"))
