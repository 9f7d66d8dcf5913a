import logging

from uvdash.config.resolution import cascade, resolve_log_level


def test_cascade_returns_first_non_none():
    assert cascade(None, "10065", "94105") == "10065"
    assert cascade(None, None, fallback="x") == "x"
    assert cascade(0, 1) == 0


def test_cli_level_beats_config_level():
    decision = resolve_log_level("debug", "ERROR")
    assert decision.name == "DEBUG"
    assert decision.value == logging.DEBUG
    assert decision.source == "cli"


def test_unknown_cli_level_falls_through_to_config():
    decision = resolve_log_level("chatty", "info")
    assert decision.name == "INFO"
    assert decision.source == "config"


def test_numeric_level_is_accepted():
    assert resolve_log_level(logging.ERROR).name == "ERROR"
    assert resolve_log_level(7, None).source == "default"


def test_fallback_when_nothing_given():
    decision = resolve_log_level()
    assert (decision.name, decision.source) == ("WARNING", "default")
    assert resolve_log_level(fallback="info").value == logging.INFO
