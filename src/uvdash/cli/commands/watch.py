import asyncio
import logging
from typing import Optional

from rich.console import Console
from rich.live import Live

from uvdash.cli.render import render_snapshot
from uvdash.config.settings import DashboardConfig
from uvdash.dashboard.factory import build_session

logger = logging.getLogger(__name__)


async def _watch(
    config: DashboardConfig,
    *,
    zipcode: Optional[str],
    lat: Optional[float],
    lng: Optional[float],
    console: Console,
) -> None:
    with Live(console=console, auto_refresh=False) as live:
        def _update(snapshot) -> None:
            live.update(render_snapshot(snapshot), refresh=True)

        async with build_session(config, on_change=_update) as session:
            _update(await session.open(zipcode, lat=lat, lng=lng))
            # Runs until cancelled; the session timers drive updates.
            await asyncio.Event().wait()


def handle(
    *,
    config: DashboardConfig,
    zipcode: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    console: Optional[Console] = None,
) -> int:
    try:
        asyncio.run(_watch(config, zipcode=zipcode, lat=lat, lng=lng, console=console or Console()))
    except KeyboardInterrupt:
        logger.info("Stopped watching")
    return 0
