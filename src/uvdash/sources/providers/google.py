from __future__ import annotations

import logging
from typing import Any, Optional

from uvdash.errors import FetchError, ResolutionError
from uvdash.sources.decoders import JsonDecoder
from uvdash.sources.models import LocationResolver
from uvdash.sources.transports import HttpTransport

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


class GoogleGeocoder(LocationResolver):
    """Google Maps Geocoding: coordinates to postal code and back."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        url: str = GEOCODE_URL,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.url = url
        self.transport = transport or HttpTransport()
        self.decoder = JsonDecoder()

    async def _query(self, **params: Any) -> dict:
        if not self.api_key:
            raise ResolutionError("Google geocoding requires an API key (GOOGLE_API_KEY)")
        try:
            chunks = await self.transport.read(self.url, params={**params, "key": self.api_key})
            data = self.decoder.load(chunks)
        except FetchError as exc:
            raise ResolutionError(f"geocoding request failed: {exc}") from exc
        except ValueError as exc:
            raise ResolutionError(f"geocoding returned invalid json: {exc}") from exc
        if not isinstance(data, dict):
            raise ResolutionError("geocoding returned an unexpected payload")
        return data

    async def resolve_zipcode(self, lat: float, lng: float) -> str:
        data = await self._query(latlng=f"{lat},{lng}")
        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            raise ResolutionError(
                f"Failed to get zip code: status={data.get('status')!r}"
            )
        for component in results[0].get("address_components", []):
            if "postal_code" in component.get("types", []):
                return str(component["long_name"])
        raise ResolutionError("Failed to get zip code: no postal_code component")

    async def locate(self, zipcode: str) -> tuple[float, float]:
        """Return ``(lat, lng)`` for a postal code; requires exactly one match."""
        data = await self._query(address=zipcode)
        results = data.get("results") or []
        if data.get("status") != "OK" or len(results) != 1:
            raise ResolutionError(
                f"Google Maps Geocode Error. status={data.get('status')!r}, "
                f"error_message={data.get('error_message')!r}"
            )
        location = results[0]["geometry"]["location"]
        return float(location["lat"]), float(location["lng"])
