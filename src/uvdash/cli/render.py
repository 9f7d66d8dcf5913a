from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from uvdash.dashboard.session import DashboardSnapshot, DashboardStatus
from uvdash.domain.series import UV_CHART_MAX

# Lower bound of each WHO exposure category.
_UV_LEVELS = (
    (11, "extreme", "magenta"),
    (8, "very high", "red"),
    (6, "high", "dark_orange"),
    (3, "moderate", "yellow"),
    (0, "low", "green"),
)


def uv_level(value: float) -> tuple[str, str]:
    """Return (label, rich style) for a UV index value."""
    for floor, label, style in _UV_LEVELS:
        if value >= floor:
            return label, style
    return "low", "green"


def _clock(value: Optional[datetime]) -> str:
    if value is None:
        return "--:--"
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime("%H:%M")


def _hour_label(value: datetime) -> str:
    hour = value.hour % 12 or 12
    return f"{hour} {'AM' if value.hour < 12 else 'PM'}"


def _location(snapshot: DashboardSnapshot) -> str:
    shown = snapshot.series_zipcode or snapshot.zipcode
    if shown is None:
        return "Loading..."
    if snapshot.zipcode and snapshot.zipcode != shown:
        return f"{shown} (waiting for {snapshot.zipcode})"
    return shown


def _header(snapshot: DashboardSnapshot) -> Text:
    day = snapshot.series.start or snapshot.now
    text = Text()
    text.append(f"UV Index for {day.strftime('%B')} {day.day}", style="bold")
    text.append(f"  Zip Code: {_location(snapshot)}")
    peak = snapshot.series.peak()
    if peak is not None:
        text.append(f"  Peak {peak.uv_value:g} at {_hour_label(peak.time)}")
    sun = snapshot.sun.local() if snapshot.sun else None
    text.append(f"  Sunrise {_clock(sun.sunrise if sun else None)}")
    text.append(f"  Sunset {_clock(sun.sunset if sun else None)}")
    text.append(f"  Now {_clock(snapshot.now)}")
    return text


def render_snapshot(snapshot: DashboardSnapshot) -> RenderableType:
    header = _header(snapshot)
    if snapshot.status is DashboardStatus.PENDING:
        return Group(header, Text("Loading UV data...", style="dim"))
    if snapshot.status is DashboardStatus.EMPTY:
        zipcode = snapshot.series_zipcode or snapshot.zipcode
        return Group(header, Text(f"No UV data available for {zipcode}", style="dim"))

    current = snapshot.current
    window = snapshot.series.day_window()
    midnight = window[1] if window else None
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Time", justify="right")
    table.add_column("UV", justify="right")
    table.add_column("Level")
    table.add_column("")
    for reading, clipped in zip(snapshot.series, snapshot.series.clipped_values()):
        label, style = uv_level(reading.uv_value)
        bar = "#" * int(round(clipped))
        marker = "< now" if reading is current else ""
        hour = _hour_label(reading.time)
        if midnight is not None and reading.time >= midnight:
            hour += " +1d"
        table.add_row(
            hour,
            f"{reading.uv_value:g}",
            Text(label, style=style),
            Text(bar.ljust(UV_CHART_MAX) + " " + marker, style=style),
        )
    return Group(header, table)


def snapshot_to_json(snapshot: DashboardSnapshot) -> str:
    payload: dict[str, Any] = {
        "zipcode": snapshot.zipcode,
        "series_zipcode": snapshot.series_zipcode,
        "status": snapshot.status.value,
        "watermark": snapshot.watermark.isoformat() if snapshot.watermark else None,
        "sunrise": snapshot.sun.sunrise.isoformat() if snapshot.sun else None,
        "sunset": snapshot.sun.sunset.isoformat() if snapshot.sun else None,
        "series": snapshot.series.to_list(),
    }
    return json.dumps(payload, indent=2, default=str)
