import asyncio
import logging
from typing import Optional

from rich.console import Console

from uvdash.cli.render import render_snapshot, snapshot_to_json
from uvdash.config.settings import DashboardConfig
from uvdash.dashboard.factory import build_session
from uvdash.dashboard.session import DashboardSnapshot, DashboardStatus

logger = logging.getLogger(__name__)


async def _load(
    config: DashboardConfig,
    *,
    zipcode: Optional[str],
    lat: Optional[float],
    lng: Optional[float],
) -> DashboardSnapshot:
    async with build_session(config) as session:
        return await session.open(zipcode, lat=lat, lng=lng)


def handle(
    *,
    config: DashboardConfig,
    zipcode: Optional[str] = None,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    as_json: bool = False,
    console: Optional[Console] = None,
) -> int:
    """Run one fetch cycle and print it. Returns a process exit code."""
    snapshot = asyncio.run(_load(config, zipcode=zipcode, lat=lat, lng=lng))
    console = console or Console()
    if as_json:
        console.print_json(snapshot_to_json(snapshot))
    else:
        console.print(render_snapshot(snapshot))
    if snapshot.status is DashboardStatus.PENDING:
        logger.error("No UV data could be loaded for %s", snapshot.zipcode)
        return 1
    return 0
