from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional


def cascade(*values, fallback=None):
    """Return the first non-None value from a list, or fallback."""
    return next((value for value in values if value is not None), fallback)


def _level_name(value: Any) -> Optional[str]:
    """Standard level name for ``value`` (name or number), or None if unknown."""
    if value is None:
        return None
    if isinstance(value, int):
        name = logging.getLevelName(value)
    else:
        name = str(value).strip().upper()
    return name if name in logging._nameToLevel else None


@dataclass(frozen=True)
class LogLevelDecision:
    name: str
    value: int
    source: str


def resolve_log_level(
    cli_level: Any = None,
    config_level: Any = None,
    *,
    fallback: str = "WARNING",
) -> LogLevelDecision:
    """CLI flag beats config file beats fallback; unknown names are ignored."""
    for source, level in (("cli", cli_level), ("config", config_level)):
        name = _level_name(level)
        if name:
            return LogLevelDecision(name=name, value=logging._nameToLevel[name], source=source)
    name = _level_name(fallback) or "WARNING"
    return LogLevelDecision(name=name, value=logging._nameToLevel[name], source="default")
