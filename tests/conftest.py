from __future__ import annotations

import pytest

from tests.unit.helpers import FakeClock, raw_row


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def morning_rows() -> list[dict]:
    """Three EPA rows delivered out of time order."""
    return [
        raw_row(1, "Jan/1/2024 07 AM", 3),
        raw_row(2, "Jan/1/2024 06 AM", 5),
        raw_row(3, "Jan/1/2024 08 AM", 4),
    ]


@pytest.fixture(autouse=True)
def _no_google_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
