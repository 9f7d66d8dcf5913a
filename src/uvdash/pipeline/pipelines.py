from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from uvdash.domain.series import UvSeries
from uvdash.pipeline.observability import (
    ObserverRegistry,
    SupportsObserver,
    default_observer_registry,
)
from uvdash.transforms.normalize import OnMalformed, RecordNormalizer
from uvdash.transforms.stream.repair import SequenceRepairTransform, SortKey

logger = logging.getLogger(__name__)


def _attach(transform: object, name: str, registry: ObserverRegistry) -> None:
    if isinstance(transform, SupportsObserver):
        transform.set_observer(registry.get(name, logging.getLogger(type(transform).__module__)))


def build_series(
    raw: Iterable[Mapping[str, Any]],
    *,
    on_malformed: OnMalformed = "skip",
    sort_by: SortKey = "time",
    observers: Optional[ObserverRegistry] = None,
) -> UvSeries:
    """Normalize raw feed records and repair their ordering into a UvSeries.

    Raises MalformedRecord when ``on_malformed="abort"`` and a record is bad;
    nothing is returned in that case, so callers never see a partial series.
    """
    registry = observers or default_observer_registry()
    normalizer = RecordNormalizer(on_malformed=on_malformed)
    repair = SequenceRepairTransform(sort_by=sort_by)
    _attach(normalizer, "normalize", registry)
    _attach(repair, "repair", registry)

    series = UvSeries.of(repair.apply(normalizer.apply(raw)))
    if normalizer.skipped or repair.rejected:
        logger.info(
            "Series built: kept=%d skipped_malformed=%d dropped_out_of_order=%d",
            len(series),
            normalizer.skipped,
            repair.rejected,
        )
    else:
        logger.debug("Series built: kept=%d", len(series))
    return series
