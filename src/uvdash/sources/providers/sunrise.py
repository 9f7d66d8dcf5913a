from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from uvdash.domain.record import SunTimes
from uvdash.errors import FetchError
from uvdash.sources.decoders import JsonDecoder
from uvdash.sources.models import SunTimesSource
from uvdash.sources.providers.google import GoogleGeocoder
from uvdash.sources.transports import HttpTransport

logger = logging.getLogger(__name__)

SUNRISE_SUNSET_URL = "https://api.sunrisesunset.io/json"


class SunriseSunsetClient(SunTimesSource):
    """sunrisesunset.io lookup for a postal code, geocoded through Google."""

    def __init__(
        self,
        geocoder: GoogleGeocoder,
        *,
        url: str = SUNRISE_SUNSET_URL,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.geocoder = geocoder
        self.url = url
        self.transport = transport or HttpTransport()
        self.decoder = JsonDecoder()

    async def fetch(self, zipcode: str, day: date) -> SunTimes:
        lat, lng = await self.geocoder.locate(zipcode)
        params = {
            "lat": lat,
            "lng": lng,
            "timezone": "UTC",
            "date": day.isoformat(),
            "time_format": "unix",
        }
        logger.info("Fetching sunrise/sunset for %s on %s", zipcode, day.isoformat())
        chunks = await self.transport.read(self.url, params=params)
        try:
            data = self.decoder.load(chunks)
        except ValueError as exc:
            raise FetchError(f"sunrise-sunset returned invalid json: {exc}", url=self.url) from exc
        if not isinstance(data, dict) or data.get("status") != "OK":
            status = data.get("status") if isinstance(data, dict) else None
            raise FetchError(f"Sunrise-sunset API error: {status}", url=self.url)
        results = data.get("results") or {}
        try:
            return SunTimes.from_unix(results["sunrise"], results["sunset"])
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"sunrise-sunset payload missing times: {exc}", url=self.url) from exc
