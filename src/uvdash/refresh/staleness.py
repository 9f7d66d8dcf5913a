from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

DEFAULT_MAX_AGE = timedelta(hours=24)
# Low-traffic local hour at which data is refreshed even when younger than max_age.
DEFAULT_REFRESH_HOUR = 4


@dataclass(frozen=True)
class StalenessPolicy:
    max_age: timedelta = DEFAULT_MAX_AGE
    refresh_hour: int = DEFAULT_REFRESH_HOUR

    def __post_init__(self) -> None:
        if not 0 <= self.refresh_hour <= 23:
            raise ValueError(f"refresh_hour must be in 0..23, got {self.refresh_hour}")
        if self.max_age <= timedelta(0):
            raise ValueError("max_age must be positive")

    def is_stale(self, watermark: Optional[datetime], now: datetime) -> bool:
        """True when data last refreshed at ``watermark`` must be replaced.

        ``watermark`` of None means never refreshed. ``now.hour`` is taken as
        the local hour of day, so ``now`` should be local time.
        """
        if watermark is None:
            return True
        return (now - watermark) > self.max_age or now.hour == self.refresh_hour

    __call__ = is_stale
