from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from uvdash.config.settings import (
    CONFIG_FILENAME,
    DashboardConfig,
    find_config_file,
    load_config,
)


def _write(directory: Path, text: str) -> Path:
    path = directory / CONFIG_FILENAME
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_config_file(tmp_path):
    ctx = load_config(start_dir=tmp_path)
    cfg = ctx.config
    assert ctx.file_path is None
    assert ctx.root is None
    assert cfg.default_zipcode == "10065"
    assert cfg.refresh.on_malformed == "skip"
    assert cfg.refresh.repair_sort == "time"
    assert cfg.sources.google_api_key is None


def test_config_is_found_in_parent_directory(tmp_path):
    path = _write(tmp_path, "default_zipcode: '94105'\nlog_level: info\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert find_config_file(nested) == path
    ctx = load_config(start_dir=nested)
    assert ctx.root == tmp_path
    assert ctx.config.default_zipcode == "94105"
    assert ctx.config.log_level == "INFO"


def test_refresh_section_builds_policy(tmp_path):
    path = _write(
        tmp_path,
        "refresh:\n"
        "  max_age_hours: 12\n"
        "  refresh_hour: 5\n"
        "  on_malformed: ABORT\n"
        "  repair_sort: order\n",
    )
    refresh = load_config(path).config.refresh
    assert refresh.on_malformed == "abort"
    assert refresh.repair_sort == "order"
    policy = refresh.policy()
    assert policy.max_age == timedelta(hours=12)
    assert policy.refresh_hour == 5


def test_null_sections_fall_back_to_defaults(tmp_path):
    path = _write(tmp_path, "refresh:\nsources:\n")
    cfg = load_config(path).config
    assert cfg.refresh.check_interval_seconds == 3600
    assert cfg.sources.timeout_seconds == 10


def test_empty_file_is_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, "")).config
    assert cfg == DashboardConfig()


def test_api_key_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "from-env")
    assert DashboardConfig().sources.google_api_key == "from-env"
    explicit = DashboardConfig.model_validate({"sources": {"google_api_key": "from-file"}})
    assert explicit.sources.google_api_key == "from-file"


@pytest.mark.parametrize(
    "data",
    [
        {"default_zipcode": "1006"},
        {"default_zipcode": "abcde"},
        {"log_level": "LOUD"},
        {"refresh": {"refresh_hour": 24}},
        {"refresh": {"on_malformed": "ignore"}},
        {"refresh": {"check_interval_seconds": 0}},
    ],
)
def test_invalid_values_are_rejected(data):
    with pytest.raises(ValidationError):
        DashboardConfig.model_validate(data)


def test_top_level_must_be_mapping(tmp_path):
    with pytest.raises(TypeError):
        load_config(_write(tmp_path, "- 1\n- 2\n"))


def test_invalid_yaml_is_value_error(tmp_path):
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(_write(tmp_path, "refresh: [unclosed\n"))
