from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Mapping

from uvdash.domain.record import SunTimes


class UvFeed(ABC):
    """Hourly UV forecast source keyed by postal code."""

    @abstractmethod
    async def fetch(self, zipcode: str) -> list[Mapping[str, Any]]:
        """Return raw records; an empty list means "no data", not an error.

        Raises FetchError on network, status or payload failures.
        """


class LocationResolver(ABC):
    @abstractmethod
    async def resolve_zipcode(self, lat: float, lng: float) -> str:
        """Return the postal code for a coordinate or raise ResolutionError."""


class SunTimesSource(ABC):
    @abstractmethod
    async def fetch(self, zipcode: str, day: date) -> SunTimes:
        """Return sunrise/sunset for ``day`` or raise FetchError/ResolutionError."""
