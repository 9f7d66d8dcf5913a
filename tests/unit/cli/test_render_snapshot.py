from __future__ import annotations

import json
from datetime import datetime

import pytest
from rich.console import Console

from uvdash.cli.render import render_snapshot, snapshot_to_json, uv_level
from uvdash.dashboard.session import DashboardSnapshot, DashboardStatus
from uvdash.domain.record import SunTimes
from uvdash.domain.series import UvSeries
from tests.unit.helpers import make_reading

NOW = datetime(2024, 1, 1, 10, 15)


def _snapshot(
    series=UvSeries(), status=DashboardStatus.READY, sun=None, zipcode="10065", series_zipcode="10065"
) -> DashboardSnapshot:
    return DashboardSnapshot(
        zipcode=zipcode,
        series_zipcode=series_zipcode,
        series=series,
        watermark=datetime(2024, 1, 1, 9).astimezone(),
        sun=sun,
        now=NOW,
        status=status,
    )


def _text(renderable) -> str:
    console = Console(record=True, width=100, color_system=None)
    console.print(renderable)
    return console.export_text()


@pytest.mark.parametrize(
    "value, label",
    [(0, "low"), (2.9, "low"), (3, "moderate"), (6, "high"), (8, "very high"), (11, "extreme"), (14, "extreme")],
)
def test_uv_level_categories(value, label):
    assert uv_level(value)[0] == label


def test_pending_snapshot_shows_loading():
    out = _text(render_snapshot(_snapshot(status=DashboardStatus.PENDING)))
    assert "Loading UV data..." in out
    assert "Sunrise --:--" in out


def test_empty_snapshot_is_not_loading():
    out = _text(render_snapshot(_snapshot(status=DashboardStatus.EMPTY)))
    assert "No UV data available for 10065" in out
    assert "Loading" not in out


def test_ready_snapshot_lists_hours_and_marks_now():
    series = UvSeries.of([make_reading(9, 2), make_reading(10, 5), make_reading(12, 13)])
    out = _text(render_snapshot(_snapshot(series)))
    lines = out.splitlines()
    assert "UV Index for January 1" in lines[0]
    assert "Zip Code: 10065" in lines[0]
    now_lines = [line for line in lines if "< now" in line]
    assert len(now_lines) == 1
    assert "10 AM" in now_lines[0]
    assert "#" * 11 in out
    assert "#" * 12 not in out


def test_json_output_carries_series_and_sun():
    sun = SunTimes.from_unix(1704111600, 1704146340)
    series = UvSeries.of([make_reading(9, 2, order=1)])
    payload = json.loads(snapshot_to_json(_snapshot(series, sun=sun)))
    assert payload["status"] == "ready"
    assert payload["sunrise"] == "2024-01-01T12:20:00+00:00"
    assert payload["series"][0]["uvValue"] == 2
    assert payload["series"][0]["dateTime"] == int(datetime(2024, 1, 1, 9).timestamp() * 1000)


def test_header_shows_peak_reading():
    series = UvSeries.of([make_reading(9, 2), make_reading(10, 5), make_reading(12, 13)])
    out = _text(render_snapshot(_snapshot(series)))
    assert "Peak 13 at 12 PM" in out


def test_readings_past_midnight_are_marked_next_day():
    series = UvSeries.of([make_reading(22, 1), make_reading(23, 1), make_reading(1, 0.5, day=2)])
    lines = _text(render_snapshot(_snapshot(series))).splitlines()
    assert any("1 AM +1d" in line for line in lines)
    assert not any("11 PM +1d" in line for line in lines)


def test_header_keeps_series_location_while_change_is_pending():
    series = UvSeries.of([make_reading(9, 2)])
    out = _text(render_snapshot(_snapshot(series, zipcode="94105", series_zipcode="10065")))
    assert "Zip Code: 10065 (waiting for 94105)" in out
    assert json.loads(snapshot_to_json(_snapshot(series, zipcode="94105", series_zipcode="10065")))[
        "series_zipcode"
    ] == "10065"
