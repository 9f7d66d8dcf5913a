from __future__ import annotations

import re
from datetime import datetime

from uvdash.errors import MalformedTimestamp

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_VENDOR_TIMESTAMP = re.compile(
    r"^\s*([A-Za-z]{3})/(\d{1,2})/(\d{4})\s+(\d{1,2})\s+(AM|PM)\s*$",
    re.IGNORECASE,
)


def to_24_hour(hour: int, period: str) -> int:
    """Convert a 1-12 clock hour to hour-of-day (12 AM -> 0, 12 PM -> 12)."""
    if not 1 <= hour <= 12:
        raise ValueError(f"hour must be in 1..12, got {hour}")
    hour = 0 if hour == 12 else hour
    if period.upper() == "PM":
        hour += 12
    return hour


def parse_vendor_timestamp(text: str) -> datetime:
    """Parse EPA dates such as ``Sep/10/2024 07 AM`` into a naive local datetime.

    The calendar fields are used as-is; no timezone conversion is applied.
    Raises MalformedTimestamp when the text does not match the vendor format.
    """
    if not isinstance(text, str):
        raise MalformedTimestamp(text)
    match = _VENDOR_TIMESTAMP.match(text)
    if match is None:
        raise MalformedTimestamp(text)

    month_raw, day_raw, year_raw, hour_raw, period = match.groups()
    try:
        month = MONTH_ABBREVIATIONS.index(month_raw.capitalize()) + 1
    except ValueError:
        raise MalformedTimestamp(text) from None

    try:
        hour = to_24_hour(int(hour_raw), period)
        return datetime(int(year_raw), month, int(day_raw), hour)
    except ValueError as exc:
        raise MalformedTimestamp(text) from exc
