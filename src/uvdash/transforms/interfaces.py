from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any, Optional

from uvdash.domain.record import UvReading
from uvdash.pipeline.observability import Observer, TransformEvent


class StreamTransformBase(ABC):
    """Base interface for stream transforms over UvReading."""

    def __init__(self) -> None:
        self._observer: Optional[Observer] = None

    def __call__(self, stream: Iterable[Any]) -> Iterator[UvReading]:
        return self.apply(stream)

    def set_observer(self, observer: Optional[Observer]) -> None:
        self._observer = observer

    def _emit(self, type_: str, **payload: object) -> None:
        if self._observer is not None:
            self._observer(TransformEvent(type=type_, payload=payload))

    @abstractmethod
    def apply(self, stream: Iterable[Any]) -> Iterator[UvReading]:
        ...
