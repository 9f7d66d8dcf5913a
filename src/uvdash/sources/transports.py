from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from uvdash.errors import FetchError

logger = logging.getLogger(__name__)


class HttpTransport:
    """Async GET transport returning the raw body as byte chunks.

    Network failures, invalid URLs and non-2xx responses surface as
    FetchError. A client may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise a client is created per request.
    """

    def __init__(
        self,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._client = client

    async def read(self, url: str, *, params: Optional[Mapping[str, Any]] = None) -> List[bytes]:
        if self._client is not None:
            return await self._read(self._client, url, params)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._read(client, url, params)

    async def _read(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: Optional[Mapping[str, Any]],
    ) -> List[bytes]:
        # Keep secrets such as API keys out of the logs.
        logger.debug("GET %s", url)
        try:
            async with client.stream("GET", url, params=params, headers=self.headers) as resp:
                if resp.status_code < 200 or resp.status_code >= 300:
                    raise FetchError(
                        f"failed to fetch {url}: HTTP {resp.status_code}",
                        url=url,
                        status=resp.status_code,
                    )
                return [chunk async for chunk in resp.aiter_bytes()]
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            raise FetchError(f"failed to fetch {url}: {e}", url=url) from e
