from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Iterator, Optional

from uvdash.domain.record import UvReading

UV_CHART_MAX = 11


@dataclass(frozen=True)
class UvSeries:
    """Immutable, instant-ordered sequence of UV readings.

    Instances are only ever replaced, never mutated. Construction verifies
    that readings are non-decreasing in time.
    """

    readings: tuple[UvReading, ...] = ()

    def __post_init__(self) -> None:
        readings = tuple(self.readings)
        for prev, cur in zip(readings, readings[1:]):
            if cur.time < prev.time:
                raise ValueError(
                    f"series out of order: {cur.time.isoformat()} follows {prev.time.isoformat()}"
                )
        object.__setattr__(self, "readings", readings)

    @classmethod
    def of(cls, readings: Iterable[UvReading]) -> "UvSeries":
        return cls(tuple(readings))

    def __iter__(self) -> Iterator[UvReading]:
        return iter(self.readings)

    def __len__(self) -> int:
        return len(self.readings)

    def __getitem__(self, idx: int) -> UvReading:
        return self.readings[idx]

    def __bool__(self) -> bool:
        return bool(self.readings)

    @property
    def start(self) -> Optional[datetime]:
        return self.readings[0].time if self.readings else None

    def peak(self) -> Optional[UvReading]:
        """Highest reading; the earliest one wins ties."""
        best: UvReading | None = None
        for reading in self.readings:
            if best is None or reading.uv_value > best.uv_value:
                best = reading
        return best

    def reading_at(self, instant: datetime) -> Optional[UvReading]:
        """Return the reading for the hour containing ``instant`` (naive local)."""
        if instant.tzinfo is not None:
            instant = instant.astimezone().replace(tzinfo=None)
        hour = instant.replace(minute=0, second=0, microsecond=0)
        found = None
        for reading in self.readings:
            if reading.time == hour:
                found = reading
            elif reading.time > hour:
                break
        return found

    def day_window(self) -> Optional[tuple[datetime, datetime]]:
        """First reading through the local midnight that follows it."""
        if not self.readings:
            return None
        first = self.readings[0].time
        day_start = first.replace(hour=0, minute=0, second=0, microsecond=0)
        return first, day_start + timedelta(days=1)

    def clipped_values(self, limit: float = UV_CHART_MAX) -> list[float]:
        return [min(max(r.uv_value, 0), limit) for r in self.readings]

    def to_list(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.readings]
