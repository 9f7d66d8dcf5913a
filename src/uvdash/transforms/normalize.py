from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Literal

from uvdash.domain.record import UvReading
from uvdash.errors import MalformedRecord
from uvdash.transforms.interfaces import StreamTransformBase
from uvdash.utils.time import parse_vendor_timestamp

logger = logging.getLogger(__name__)

OnMalformed = Literal["skip", "abort"]

TIMESTAMP_FIELD = "dateTime"

# camelCase key -> UvReading attribute
_FIELD_MAP = {
    "order": "order",
    "zip": "zip",
    "city": "city",
    "state": "state",
    "dateTime": "time",
    "uvValue": "uv_value",
}
_REQUIRED = ("dateTime", "uvValue")

_UNDERSCORE_WORD = re.compile(r"_(\w)")


def to_camel_case(key: str) -> str:
    """``UV_VALUE`` -> ``uvValue``; ``ZIP`` -> ``zip``."""
    return _UNDERSCORE_WORD.sub(lambda m: m.group(1).upper(), key.lower())


def keys_to_camel_case(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {to_camel_case(str(key)): value for key, value in raw.items()}


def normalize_record(raw: Mapping[str, Any]) -> UvReading:
    """Convert one raw EPA record into a UvReading.

    Keys are camelCased and the timestamp string is parsed; every other value
    passes through unchanged. Raises MalformedRecord (or its subclass
    MalformedTimestamp) when the record cannot be converted.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"expected a mapping, got {type(raw).__name__}", record=raw)
    fields = keys_to_camel_case(raw)
    missing = [name for name in _REQUIRED if name not in fields]
    if missing:
        raise MalformedRecord(f"record missing field(s): {', '.join(missing)}", record=raw)

    try:
        fields[TIMESTAMP_FIELD] = parse_vendor_timestamp(fields[TIMESTAMP_FIELD])
    except MalformedRecord as exc:
        exc.record = raw
        raise

    known = {_FIELD_MAP[k]: v for k, v in fields.items() if k in _FIELD_MAP}
    extras = {k: v for k, v in fields.items() if k not in _FIELD_MAP}
    return UvReading(extras=extras, **known)


class RecordNormalizer(StreamTransformBase):
    """Stream transform from raw feed mappings to UvReading.

    Does not sort, deduplicate or filter. With ``on_malformed="skip"`` bad
    records are dropped and reported through the observer; with ``"abort"``
    the first MalformedRecord propagates.
    """

    def __init__(self, on_malformed: OnMalformed = "skip") -> None:
        super().__init__()
        if on_malformed not in ("skip", "abort"):
            raise ValueError(f"on_malformed must be 'skip' or 'abort', got {on_malformed!r}")
        self.on_malformed = on_malformed
        self.skipped = 0

    def apply(self, stream: Iterable[Mapping[str, Any]]) -> Iterator[UvReading]:
        for raw in stream:
            try:
                yield normalize_record(raw)
            except MalformedRecord as exc:
                if self.on_malformed == "abort":
                    raise
                self.skipped += 1
                self._emit("malformed_record", record=raw, error=str(exc))


def normalize_records(
    raw: Iterable[Mapping[str, Any]],
    *,
    on_malformed: OnMalformed = "skip",
) -> list[UvReading]:
    normalizer = RecordNormalizer(on_malformed=on_malformed)
    readings = list(normalizer.apply(raw))
    if normalizer.skipped:
        logger.info("Normalizer skipped %d malformed record(s)", normalizer.skipped)
    return readings
