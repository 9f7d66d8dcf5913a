from __future__ import annotations

from typing import Callable, Optional

import httpx

from uvdash.config.settings import DashboardConfig
from uvdash.dashboard.session import DashboardSession, DashboardSnapshot
from uvdash.refresh.clock import Clock
from uvdash.refresh.orchestrator import RefreshOrchestrator
from uvdash.sources.providers.epa import EpaUvFeed
from uvdash.sources.providers.google import GoogleGeocoder
from uvdash.sources.providers.sunrise import SunriseSunsetClient
from uvdash.sources.transports import HttpTransport


def build_session(
    config: DashboardConfig,
    *,
    client: Optional[httpx.AsyncClient] = None,
    clock: Optional[Clock] = None,
    on_change: Optional[Callable[[DashboardSnapshot], None]] = None,
) -> DashboardSession:
    """Wire the HTTP collaborators, orchestrator and session from config."""
    sources = config.sources
    refresh = config.refresh
    transport = HttpTransport(timeout=sources.timeout_seconds, client=client)

    geocoder = GoogleGeocoder(sources.google_api_key, url=sources.geocode_url, transport=transport)
    orchestrator = RefreshOrchestrator(
        EpaUvFeed(base_url=sources.uv_feed_url, transport=transport),
        policy=refresh.policy(),
        clock=clock,
        on_malformed=refresh.on_malformed,
        sort_by=refresh.repair_sort,
        check_interval=refresh.check_interval_seconds,
    )
    return DashboardSession(
        orchestrator,
        sun_source=SunriseSunsetClient(geocoder, url=sources.sunrise_url, transport=transport),
        resolver=geocoder,
        clock=clock,
        default_zipcode=config.default_zipcode,
        tick_interval=refresh.tick_interval_seconds,
        on_change=on_change,
    )
