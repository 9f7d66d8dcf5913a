from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class UvReading:
    """Canonical hourly UV sample.

    ``time`` is a naive local wall-clock datetime: the vendor's calendar
    fields are taken as-is, without any timezone conversion.
    """

    time: datetime
    uv_value: float
    zip: str | None = None
    city: str | None = None
    state: str | None = None
    order: int | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.time.tzinfo is not None:
            raise ValueError("time must be a naive local wall-clock datetime")

    @property
    def timestamp_ms(self) -> int:
        """Milliseconds since epoch, interpreting ``time`` in the local calendar."""
        return int(self.time.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire form consumed by presentation code."""
        payload: dict[str, Any] = dict(self.extras)
        payload.update(
            order=self.order,
            zip=self.zip,
            city=self.city,
            state=self.state,
            dateTime=self.timestamp_ms,
            uvValue=self.uv_value,
        )
        return payload


@dataclass(frozen=True)
class SunTimes:
    sunrise: datetime
    sunset: datetime

    def __post_init__(self) -> None:
        for name in ("sunrise", "sunset"):
            value = getattr(self, name)
            if value.tzinfo is None:
                raise ValueError(f"{name} must be timezone-aware")

    @classmethod
    def from_unix(cls, sunrise: int | float | str, sunset: int | float | str) -> "SunTimes":
        return cls(
            sunrise=datetime.fromtimestamp(float(sunrise), tz=timezone.utc),
            sunset=datetime.fromtimestamp(float(sunset), tz=timezone.utc),
        )

    def local(self) -> "SunTimes":
        return SunTimes(sunrise=self.sunrise.astimezone(), sunset=self.sunset.astimezone())
