from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime
from typing import Callable, Literal

from uvdash.domain.record import UvReading
from uvdash.transforms.interfaces import StreamTransformBase

SortKey = Literal["time", "order"]


def _by_time(reading: UvReading):
    return reading.time


def _by_order(reading: UvReading):
    # Readings without an ordinal keep their relative position after the rest.
    return (reading.order is None, reading.order if reading.order is not None else 0)


_SORT_KEYS: dict[str, Callable[[UvReading], object]] = {
    "time": _by_time,
    "order": _by_order,
}


class SequenceRepairTransform(StreamTransformBase):
    """Drop readings that go back in time after sorting.

    The UV feed has served corrupt, out-of-order rows. Input is stable-sorted
    (by time, or by the feed's ``order`` ordinal), then scanned once: a reading
    is kept when it is not earlier than the last kept reading. The scan is
    greedy (no look-ahead), so the result is not necessarily the longest
    ordered subsequence. Gaps in ``order`` are expected.
    """

    def __init__(self, sort_by: SortKey = "time") -> None:
        super().__init__()
        if sort_by not in _SORT_KEYS:
            raise ValueError(f"sort_by must be one of {', '.join(_SORT_KEYS)}, got {sort_by!r}")
        self.sort_by = sort_by
        self.rejected = 0

    def apply(self, stream: Iterable[UvReading]) -> Iterator[UvReading]:
        last: datetime | None = None
        for reading in sorted(stream, key=_SORT_KEYS[self.sort_by]):
            if last is None or reading.time >= last:
                last = reading.time
                yield reading
                continue
            self.rejected += 1
            self._emit("repair_rejected", record=reading, previous=last)


def repair_sequence(readings: Iterable[UvReading], *, sort_by: SortKey = "time") -> list[UvReading]:
    return list(SequenceRepairTransform(sort_by=sort_by).apply(readings))
