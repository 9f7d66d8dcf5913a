from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from uvdash.refresh.staleness import StalenessPolicy
from uvdash.sources.providers.epa import EPA_EFSERVICE_URL
from uvdash.sources.providers.google import GEOCODE_URL
from uvdash.sources.providers.sunrise import SUNRISE_SUNSET_URL

CONFIG_FILENAME = "uvdash.yaml"
API_KEY_ENV = "GOOGLE_API_KEY"
DEFAULT_ZIP_CODE = "10065"
VALID_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_ZIP_PATTERN = re.compile(r"^\d{5}$")


def validate_zipcode(value: object) -> str:
    text = str(value).strip()
    if not _ZIP_PATTERN.match(text):
        raise ValueError(f"zip code must be 5 digits, got {value!r}")
    return text


class RefreshSettings(BaseModel):
    check_interval_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds between staleness checks (a check never forces a fetch).",
    )
    tick_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between 'now' clock ticks for the dashboard.",
    )
    max_age_hours: float = Field(
        default=24.0,
        gt=0,
        description="Data older than this is refreshed.",
    )
    refresh_hour: int = Field(
        default=4,
        ge=0,
        le=23,
        description="Local hour of day at which data is always refreshed.",
    )
    on_malformed: Literal["skip", "abort"] = Field(
        default="skip",
        description="skip: drop malformed feed rows; abort: discard the whole fetch.",
    )
    repair_sort: Literal["time", "order"] = Field(
        default="time",
        description="Key used to order readings before the out-of-order scan.",
    )

    @field_validator("on_malformed", "repair_sort", mode="before")
    @classmethod
    def _normalize_choice(cls, value):
        if value is None:
            return value
        return str(value).strip().lower()

    def policy(self) -> StalenessPolicy:
        return StalenessPolicy(
            max_age=timedelta(hours=self.max_age_hours),
            refresh_hour=self.refresh_hour,
        )


class SourceSettings(BaseModel):
    uv_feed_url: str = EPA_EFSERVICE_URL
    geocode_url: str = GEOCODE_URL
    sunrise_url: str = SUNRISE_SUNSET_URL
    timeout_seconds: float = Field(default=10.0, gt=0)
    google_api_key: Optional[str] = Field(
        default=None,
        description=f"Google Maps API key; falls back to ${API_KEY_ENV} when unset.",
    )

    @model_validator(mode="after")
    def _key_from_env(self):
        if not self.google_api_key:
            self.google_api_key = os.environ.get(API_KEY_ENV) or None
        return self


class DashboardConfig(BaseModel):
    default_zipcode: str = DEFAULT_ZIP_CODE
    log_level: Optional[str] = Field(default=None, description="DEFAULT LOG LEVEL")
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)

    @field_validator("default_zipcode", mode="before")
    @classmethod
    def _validate_zip(cls, value):
        return validate_zipcode(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value):
        if value is None:
            return None
        name = str(value).strip().upper()
        if not name:
            return None
        if name not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(VALID_LOG_LEVELS)}, got {value!r}"
            )
        return name


@dataclass
class ConfigContext:
    file_path: Optional[Path]
    config: DashboardConfig

    @property
    def root(self) -> Optional[Path]:
        return self.file_path.parent if self.file_path else None


def _read_yaml(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"{path.name} must define a mapping at the top level, got {type(data).__name__}")
    return data


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Search from start_dir upward for uvdash.yaml."""
    directory = (start_dir or Path.cwd()).resolve()
    for path in [directory, *directory.parents]:
        candidate = path / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path] = None, *, start_dir: Optional[Path] = None) -> ConfigContext:
    """Load an explicit config file, or the nearest uvdash.yaml, or defaults."""
    file_path = path if path is not None else find_config_file(start_dir)
    if file_path is None:
        return ConfigContext(file_path=None, config=DashboardConfig())
    data = _read_yaml(file_path)
    # Allow sections set to null to fall back to defaults
    for key in ("refresh", "sources"):
        if key in data and data[key] is None:
            data.pop(key)
    return ConfigContext(file_path=file_path, config=DashboardConfig.model_validate(data))
