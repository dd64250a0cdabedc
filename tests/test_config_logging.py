"""Tests for configuration validation and log filtering."""

import pytest

from hexoffice import logging_utils
from hexoffice.config import Config
from hexoffice.errors import AmbiguousGroupingWarning, warn_soft
from hexoffice.logging_utils import Color, colored, log_debug, log_error, log_warning


def test_config_validate_rejects_bad_values(monkeypatch):
    monkeypatch.setattr(Config, "LOG_LEVEL", "WARNING")
    monkeypatch.setattr(Config, "GROUP_CACHE_SIZE", 8)
    Config.validate()

    monkeypatch.setattr(Config, "LOG_LEVEL", "LOUD")
    with pytest.raises(ValueError):
        Config.validate()

    monkeypatch.setattr(Config, "LOG_LEVEL", "INFO")
    monkeypatch.setattr(Config, "GROUP_CACHE_SIZE", -1)
    with pytest.raises(ValueError):
        Config.validate()

    monkeypatch.setattr(Config, "GROUP_CACHE_SIZE", 8)
    monkeypatch.setattr(Config, "MAX_ADVANCE_DAYS", -1)
    with pytest.raises(ValueError):
        Config.validate()


def test_config_display_lists_settings():
    text = Config.display()
    assert text.startswith("Hexoffice Configuration:")
    assert "Group Cache Size" in text
    assert "Max Advance Days" in text


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.delenv("HEXOFFICE_NO_COLOR", raising=False)
    assert colored("hi", Color.RED) == f"{Color.RED.value}hi{Color.RESET.value}"

    monkeypatch.setenv("HEXOFFICE_NO_COLOR", "1")
    assert colored("hi", Color.RED, bold=True) == "hi"


def test_log_level_threshold(monkeypatch, capsys):
    monkeypatch.setenv("HEXOFFICE_NO_COLOR", "1")
    monkeypatch.setattr(Config, "LOG_LEVEL", "WARNING")

    log_debug("grouped rooms")
    log_warning("orphan reservation")
    log_error("broken map")
    out = capsys.readouterr().out

    assert "grouped rooms" not in out
    assert "[!] orphan reservation" in out
    assert "broken map" in out

    monkeypatch.setattr(Config, "LOG_LEVEL", "DEBUG")
    assert logging_utils.is_enabled("DEBUG")
    log_debug("grouped rooms")
    assert "[•] grouped rooms" in capsys.readouterr().out


def test_warn_soft_logs_and_warns(monkeypatch, capsys):
    monkeypatch.setenv("HEXOFFICE_NO_COLOR", "1")
    monkeypatch.setattr(Config, "LOG_LEVEL", "WARNING")
    with pytest.warns(AmbiguousGroupingWarning, match="overlap"):
        warn_soft("cells overlap", AmbiguousGroupingWarning)
    assert "[!] cells overlap" in capsys.readouterr().out
