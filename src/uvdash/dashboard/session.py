from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from uvdash.domain.record import SunTimes, UvReading
from uvdash.domain.series import UvSeries
from uvdash.errors import UvDashError
from uvdash.refresh.clock import Clock, SystemClock
from uvdash.refresh.orchestrator import RefreshOrchestrator
from uvdash.sources.models import LocationResolver, SunTimesSource

logger = logging.getLogger(__name__)

MINUTE_IN_SECONDS = 60


class DashboardStatus(str, Enum):
    PENDING = "pending"
    EMPTY = "empty"
    READY = "ready"


@dataclass(frozen=True)
class DashboardSnapshot:
    zipcode: Optional[str]
    # Location the series belongs to; lags ``zipcode`` until a fetch for it succeeds.
    series_zipcode: Optional[str]
    series: UvSeries
    watermark: Optional[datetime]
    sun: Optional[SunTimes]
    now: datetime
    status: DashboardStatus

    @property
    def current(self) -> Optional[UvReading]:
        return self.series.reading_at(self.now)


class DashboardSession:
    """Everything one dashboard view needs, with its timers.

    Resolves the user's postal code (falling back to a default), keeps the
    UV series fresh through the orchestrator, reloads sunrise/sunset whenever
    the location changes, and ticks ``now`` every minute. ``close()`` tears all
    recurring work down.
    """

    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        *,
        sun_source: Optional[SunTimesSource] = None,
        resolver: Optional[LocationResolver] = None,
        clock: Optional[Clock] = None,
        default_zipcode: str = "10065",
        tick_interval: float = MINUTE_IN_SECONDS,
        on_change: Optional[Callable[[DashboardSnapshot], None]] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.sun_source = sun_source
        self.resolver = resolver
        self.clock = clock or SystemClock()
        self.default_zipcode = default_zipcode
        self.tick_interval = tick_interval
        self.on_change = on_change

        self._sun: Optional[SunTimes] = None
        self._now = self.clock.now()
        self._ticker: Optional[asyncio.Task] = None
        self._closed = False

        if orchestrator.on_update is None:
            orchestrator.on_update = lambda _snapshot: self._notify()

    @property
    def zipcode(self) -> Optional[str]:
        return self.orchestrator.zipcode

    @property
    def sun(self) -> Optional[SunTimes]:
        return self._sun

    def snapshot(self) -> DashboardSnapshot:
        state = self.orchestrator.snapshot()
        if not state.loaded:
            status = DashboardStatus.PENDING
        elif not state.series:
            status = DashboardStatus.EMPTY
        else:
            status = DashboardStatus.READY
        return DashboardSnapshot(
            zipcode=state.zipcode,
            series_zipcode=state.series_zipcode,
            series=state.series,
            watermark=state.watermark,
            sun=self._sun,
            now=self._now,
            status=status,
        )

    def _notify(self) -> None:
        if self.on_change is None or self._closed:
            return
        try:
            self.on_change(self.snapshot())
        except Exception:
            logger.exception("Dashboard change callback failed")

    async def resolve_location(
        self,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> str:
        """Postal code for the coordinates, or the default when unavailable."""
        if lat is None or lng is None:
            logger.info("No coordinates available, using default zip code %s", self.default_zipcode)
            return self.default_zipcode
        if self.resolver is None:
            logger.info("No location resolver configured, using default zip code %s", self.default_zipcode)
            return self.default_zipcode
        try:
            zipcode = await self.resolver.resolve_zipcode(lat, lng)
        except UvDashError as exc:
            logger.warning("Failed to resolve zip code for user location: %s", exc)
            return self.default_zipcode
        except Exception:
            logger.exception("Unexpected error resolving user location")
            return self.default_zipcode
        logger.info("Resolved user location to zip code %s", zipcode)
        return zipcode

    async def open(
        self,
        zipcode: Optional[str] = None,
        *,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> DashboardSnapshot:
        if zipcode is None:
            zipcode = await self.resolve_location(lat, lng)
        self._now = self.clock.now()
        self.orchestrator.start()
        self._start_ticker()
        await asyncio.gather(
            self.orchestrator.activate(zipcode),
            self.load_sun_times(zipcode),
        )
        return self.snapshot()

    async def change_zipcode(self, zipcode: str) -> DashboardSnapshot:
        await asyncio.gather(
            self.orchestrator.set_zipcode(zipcode),
            self.load_sun_times(zipcode),
        )
        return self.snapshot()

    async def load_sun_times(self, zipcode: str) -> bool:
        if self.sun_source is None:
            return False
        try:
            times = await self.sun_source.fetch(zipcode, self.clock.now().date())
        except UvDashError as exc:
            logger.warning("Failed to fetch sunrise/sunset for %s: %s", zipcode, exc)
            return False
        except Exception:
            logger.exception("Unexpected error fetching sunrise/sunset for %s", zipcode)
            return False
        if zipcode != self.orchestrator.zipcode:
            logger.debug("Dropping sunrise/sunset for %s: location changed", zipcode)
            return False
        self._sun = times
        self._notify()
        return True

    def _start_ticker(self) -> None:
        if self._ticker is None or self._ticker.done():
            self._ticker = asyncio.get_running_loop().create_task(self._tick())

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            self._now = self.clock.now()
            self._notify()

    async def close(self) -> None:
        self._closed = True
        if self._ticker is not None and not self._ticker.done():
            self._ticker.cancel()
            await asyncio.gather(self._ticker, return_exceptions=True)
        self._ticker = None
        await self.orchestrator.stop()

    async def __aenter__(self) -> "DashboardSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
