from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from uvdash.domain.series import UvSeries
from uvdash.errors import UvDashError
from uvdash.pipeline.observability import ObserverRegistry
from uvdash.pipeline.pipelines import build_series
from uvdash.refresh.clock import Clock, SystemClock
from uvdash.refresh.staleness import StalenessPolicy
from uvdash.sources.models import UvFeed
from uvdash.transforms.normalize import OnMalformed
from uvdash.transforms.stream.repair import SortKey

logger = logging.getLogger(__name__)

HOUR_IN_SECONDS = 60 * 60


class RefreshState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


@dataclass(frozen=True)
class SeriesSnapshot:
    """Read-only view of the orchestrator state at one instant."""

    zipcode: Optional[str]
    series: UvSeries
    series_zipcode: Optional[str]
    watermark: Optional[datetime]
    generation: int
    state: RefreshState

    @property
    def loaded(self) -> bool:
        return self.watermark is not None


class RefreshOrchestrator:
    """Owns the current UV series and decides when to refetch it.

    Triggers: ``activate`` (first use), ``set_zipcode`` (location change) and an
    hourly timer started with ``start()`` that only re-checks the staleness
    policy. A fetch already in flight for the current location is joined rather
    than duplicated. Each fetch carries the generation current at its start and
    its result is dropped if the location changed meanwhile. Failures keep the
    previous series and watermark.
    """

    def __init__(
        self,
        feed: UvFeed,
        *,
        policy: Optional[StalenessPolicy] = None,
        clock: Optional[Clock] = None,
        on_malformed: OnMalformed = "skip",
        sort_by: SortKey = "time",
        check_interval: float = HOUR_IN_SECONDS,
        observers: Optional[ObserverRegistry] = None,
        on_update: Optional[Callable[[SeriesSnapshot], None]] = None,
    ) -> None:
        self._feed = feed
        self._policy = policy or StalenessPolicy()
        self._clock = clock or SystemClock()
        self._on_malformed = on_malformed
        self._sort_by = sort_by
        self._observers = observers
        self.check_interval = check_interval
        self.on_update = on_update

        self._series = UvSeries()
        self._series_zipcode: Optional[str] = None
        self._watermark: Optional[datetime] = None
        self._zipcode: Optional[str] = None
        self._generation = 0

        self._inflight: Optional[asyncio.Task] = None
        self._inflight_generation: Optional[int] = None
        self._pending: set[asyncio.Task] = set()
        self._timer: Optional[asyncio.Task] = None

    # -- read access -------------------------------------------------------

    @property
    def series(self) -> UvSeries:
        return self._series

    @property
    def watermark(self) -> Optional[datetime]:
        return self._watermark

    @property
    def zipcode(self) -> Optional[str]:
        return self._zipcode

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def state(self) -> RefreshState:
        return RefreshState.FETCHING if self.is_fetching else RefreshState.IDLE

    def snapshot(self) -> SeriesSnapshot:
        return SeriesSnapshot(
            zipcode=self._zipcode,
            series=self._series,
            series_zipcode=self._series_zipcode,
            watermark=self._watermark,
            generation=self._generation,
            state=self.state,
        )

    def is_stale(self) -> bool:
        if self._series_zipcode != self._zipcode:
            return True
        return self._policy.is_stale(self._watermark, self._clock.now())

    # -- triggers ----------------------------------------------------------

    async def activate(self, zipcode: str) -> bool:
        """First activation: adopt ``zipcode`` and load data if stale."""
        return await self.set_zipcode(zipcode)

    async def set_zipcode(self, zipcode: str) -> bool:
        """Switch location; a new postal code always fetches.

        Returns True when this call applied a new series.
        """
        if zipcode == self._zipcode:
            return await self.refresh_if_needed()
        self._zipcode = zipcode
        self._generation += 1
        logger.info("Location set to %s (generation %d)", zipcode, self._generation)
        return await self.refresh()

    async def refresh_if_needed(self) -> bool:
        if self._zipcode is None:
            logger.debug("Staleness check skipped: no location yet")
            return False
        if not self.is_stale():
            logger.debug("UV data for %s is fresh (watermark=%s)", self._zipcode, self._watermark)
            return False
        return await self.refresh()

    async def refresh(self) -> bool:
        """Fetch now for the current location, joining any fetch in flight."""
        if self._zipcode is None:
            logger.warning("Refresh requested before a location was set")
            return False
        return await asyncio.shield(self._ensure_fetch())

    def _ensure_fetch(self) -> asyncio.Task:
        if self.is_fetching and self._inflight_generation == self._generation:
            logger.debug("Joining in-flight fetch for %s", self._zipcode)
            return self._inflight
        task = asyncio.get_running_loop().create_task(
            self._cycle(self._generation, self._zipcode)
        )
        self._inflight = task
        self._inflight_generation = self._generation
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _cycle(self, generation: int, zipcode: str) -> bool:
        logger.info("Fetching UV data for %s", zipcode)
        try:
            raw = await self._feed.fetch(zipcode)
            series = build_series(
                raw,
                on_malformed=self._on_malformed,
                sort_by=self._sort_by,
                observers=self._observers,
            )
        except UvDashError as exc:
            logger.warning("UV refresh for %s failed; keeping previous data: %s", zipcode, exc)
            return False
        except Exception:
            logger.exception("Unexpected error refreshing UV data for %s; keeping previous data", zipcode)
            return False

        if generation != self._generation:
            logger.info(
                "Discarding UV data for %s: superseded by generation %d",
                zipcode,
                self._generation,
            )
            return False

        self._series = series
        self._series_zipcode = zipcode
        self._watermark = self._clock.now()
        logger.info("UV series for %s updated: %d reading(s)", zipcode, len(series))
        if self.on_update is not None:
            try:
                self.on_update(self.snapshot())
            except Exception:
                logger.exception("UV update callback failed")
        return True

    # -- periodic check ----------------------------------------------------

    async def _run_checks(self) -> None:
        while True:
            await asyncio.sleep(self.check_interval)
            try:
                await self.refresh_if_needed()
            except Exception:
                logger.exception("Periodic staleness check failed")

    def start(self) -> None:
        """Start the periodic staleness check on the running loop."""
        if self._timer is not None and not self._timer.done():
            return
        self._timer = asyncio.get_running_loop().create_task(self._run_checks())

    async def stop(self) -> None:
        """Cancel the periodic check and any fetch still in flight."""
        tasks = [t for t in (self._timer, *self._pending) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._timer = None
        self._inflight = None
        self._inflight_generation = None

    async def __aenter__(self) -> "RefreshOrchestrator":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
