from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping

from uvdash.domain.record import SunTimes, UvReading
from uvdash.errors import FetchError
from uvdash.refresh.clock import Clock
from uvdash.sources.models import LocationResolver, SunTimesSource, UvFeed


def make_reading(hour: int, value: float = 1.0, *, order: int | None = None, day: int = 1) -> UvReading:
    return UvReading(
        time=datetime(2024, 1, day, hour),
        uv_value=value,
        zip="10065",
        city="NEW YORK",
        state="NY",
        order=order,
    )


def raw_row(order: int, stamp: str, value: float, *, zipcode: str = "10065") -> dict[str, Any]:
    return {
        "ORDER": order,
        "ZIP": zipcode,
        "CITY": "NEW YORK",
        "STATE": "NY",
        "DATE_TIME": stamp,
        "UV_VALUE": value,
    }


class FakeClock(Clock):
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class StubFeed(UvFeed):
    """Feed returning canned rows per zip code, optionally gated on an event."""

    def __init__(
        self,
        rows: Mapping[str, list[dict[str, Any]]] | None = None,
        *,
        gates: Mapping[str, asyncio.Event] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        self.rows = dict(rows or {})
        self.gates = dict(gates or {})
        self.failures = set(failures or ())
        self.calls: list[str] = []

    async def fetch(self, zipcode: str) -> list[Mapping[str, Any]]:
        self.calls.append(zipcode)
        gate = self.gates.get(zipcode)
        if gate is not None:
            await gate.wait()
        if zipcode in self.failures:
            raise FetchError(f"feed down for {zipcode}")
        return list(self.rows.get(zipcode, []))


class StubResolver(LocationResolver):
    def __init__(self, zipcode: str | None = None, error: Exception | None = None) -> None:
        self.zipcode = zipcode
        self.error = error

    async def resolve_zipcode(self, lat: float, lng: float) -> str:
        if self.error is not None:
            raise self.error
        return self.zipcode


class StubSunSource(SunTimesSource):
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, date]] = []

    async def fetch(self, zipcode: str, day: date) -> SunTimes:
        self.calls.append((zipcode, day))
        if self.error is not None:
            raise self.error
        return SunTimes(
            sunrise=datetime(2024, 1, 1, 12, 20, tzinfo=timezone.utc),
            sunset=datetime(2024, 1, 1, 21, 39, tzinfo=timezone.utc),
        )
