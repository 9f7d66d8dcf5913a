from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransformEvent:
    type: str
    payload: Mapping[str, object] = field(default_factory=dict)


# Observer receives a structured event.
Observer = Callable[[TransformEvent], None]
# Factory builds an observer for a stage logger; returning None opts out at the current level.
ObserverFactory = Callable[[logging.Logger], Optional[Observer]]


@runtime_checkable
class SupportsObserver(Protocol):
    def set_observer(self, observer: Optional[Observer]) -> None:
        ...


class ObserverRegistry:
    """Observer factories per pipeline stage (``normalize``, ``repair``).

    Several factories may be registered for one stage; events then fan out to
    every observer they produce, in registration order.
    """

    def __init__(self, factories: Optional[Mapping[str, ObserverFactory]] = None) -> None:
        self._factories: dict[str, list[ObserverFactory]] = {}
        for stage, factory in (factories or {}).items():
            self.register(stage, factory)

    def register(self, stage: str, factory: ObserverFactory) -> None:
        self._factories.setdefault(stage, []).append(factory)

    def get(self, stage: str, logger: logging.Logger) -> Optional[Observer]:
        observers = [
            observer
            for observer in (factory(logger) for factory in self._factories.get(stage, ()))
            if observer is not None
        ]
        if not observers:
            return None
        if len(observers) == 1:
            return observers[0]

        def _fan_out(event: TransformEvent) -> None:
            for observer in observers:
                observer(event)

        return _fan_out


def _repair_observer_factory(logger: logging.Logger) -> Optional[Observer]:
    if not logger.isEnabledFor(logging.WARNING):
        return None

    def _observer(event: TransformEvent) -> None:
        if event.type != "repair_rejected":
            return
        record = event.payload.get("record")
        time = getattr(record, "time", None)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Reading out of order dropped: order=%s time=%s previous=%s",
                getattr(record, "order", None),
                time,
                event.payload.get("previous"),
            )
        else:
            logger.warning("Data point found not in the correct order: time=%s", time)

    return _observer


def _malformed_observer_factory(logger: logging.Logger) -> Optional[Observer]:
    if not logger.isEnabledFor(logging.WARNING):
        return None

    seen = 0

    def _observer(event: TransformEvent) -> None:
        nonlocal seen
        if event.type != "malformed_record":
            return
        seen += 1
        error = event.payload.get("error")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Skipping malformed record %s: %s", event.payload.get("record"), error)
        elif seen == 1:
            # Warn once per cycle; the count is reported in the cycle summary.
            logger.warning("Skipping malformed UV record: %s", error)

    return _observer


def default_observer_registry() -> ObserverRegistry:
    return ObserverRegistry(
        {
            "repair": _repair_observer_factory,
            "normalize": _malformed_observer_factory,
        }
    )
