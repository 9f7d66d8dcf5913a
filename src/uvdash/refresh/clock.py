from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    """Source of the current instant; substituted in tests."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current timezone-aware local time."""


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now().astimezone()
