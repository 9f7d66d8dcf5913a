from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from uvdash.errors import FetchError
from uvdash.sources.decoders import JsonDecoder
from uvdash.sources.models import UvFeed
from uvdash.sources.transports import HttpTransport

logger = logging.getLogger(__name__)

EPA_EFSERVICE_URL = "https://data.epa.gov/efservice"


class EpaUvFeed(UvFeed):
    """Envirofacts hourly UV index by ZIP code (no authentication)."""

    def __init__(
        self,
        *,
        base_url: str = EPA_EFSERVICE_URL,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport or HttpTransport()
        self.decoder = JsonDecoder(require_array=True)

    def url_for(self, zipcode: str) -> str:
        return f"{self.base_url}/getEnvirofactsUVHOURLY/ZIP/{zipcode}/JSON"

    async def fetch(self, zipcode: str) -> list[Mapping[str, Any]]:
        url = self.url_for(zipcode)
        chunks = await self.transport.read(url)
        try:
            rows = list(self.decoder.decode(chunks))
        except ValueError as exc:
            raise FetchError(f"malformed UV feed response for {zipcode}: {exc}", url=url) from exc
        logger.debug("UV feed returned %d row(s) for %s", len(rows), zipcode)
        return rows
