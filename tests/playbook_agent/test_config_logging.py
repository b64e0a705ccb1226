"""
Tests for the playbook table, process settings and logging setup.
"""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from playbook_agent.config import (
    ConfigError,
    PlaybookConfig,
    PlaybooksConfig,
    Settings,
    default_playbooks_config,
    load_playbook_config,
)
from playbook_agent.logger import close_logging, setup_logging
from playbook_agent.playbooks import Playbook

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config" / "playbooks.json"


def test_default_order():
    ordered = default_playbooks_config().ordered()
    assert [pb for pb, _ in ordered] == [Playbook.NBB, Playbook.JADECAP, Playbook.TORI, Playbook.FABIO]
    assert [cfg.min_confidence for _, cfg in ordered] == [70, 65, 70, 65]


def test_duplicate_priorities_rejected():
    with pytest.raises(ValidationError, match="duplicate priority"):
        PlaybooksConfig(
            playbooks={
                Playbook.NBB: PlaybookConfig(priority=1, min_confidence=70),
                Playbook.TORI: PlaybookConfig(priority=1, min_confidence=70),
            }
        )


def test_duplicate_priority_via_override_rejected():
    with pytest.raises(ValidationError):
        default_playbooks_config().with_overrides(Playbook.JADECAP, priority=1)


@pytest.mark.parametrize(
    "values",
    [
        {"priority": 0, "min_confidence": 70},
        {"priority": 11, "min_confidence": 70},
        {"priority": 1, "min_confidence": -1},
        {"priority": 1, "min_confidence": 101},
        {"priority": 1, "min_confidence": 70, "weight": 2},
    ],
)
def test_playbook_config_bounds(values):
    with pytest.raises(ValidationError):
        PlaybookConfig(**values)


def test_with_overrides_leaves_original_untouched():
    base = default_playbooks_config()
    changed = base.with_overrides(Playbook.NBB, enabled=False)
    assert base.get(Playbook.NBB).enabled is True
    assert changed.get(Playbook.NBB).enabled is False
    assert Playbook.NBB not in [pb for pb, _ in changed.ordered()]


def test_load_playbook_config(tmp_path):
    path = tmp_path / "playbooks.json"
    path.write_text(json.dumps({
        "playbooks": {
            "TORI": {"priority": 1, "min_confidence": 60},
            "FABIO": {"enabled": False, "priority": 2, "min_confidence": 60},
        }
    }))
    config = load_playbook_config(path)
    assert [pb for pb, _ in config.ordered()] == [Playbook.TORI]
    assert config.get(Playbook.NBB) is None


def test_repo_config_matches_defaults():
    config = load_playbook_config(REPO_CONFIG)
    assert [(pb, cfg.priority, cfg.min_confidence) for pb, cfg in config.ordered()] == [
        (pb, cfg.priority, cfg.min_confidence) for pb, cfg in default_playbooks_config().ordered()
    ]


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_playbook_config(tmp_path / "missing.json")


def test_malformed_config_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{playbooks: ")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_playbook_config(path)


def test_invalid_config_values(tmp_path):
    path = tmp_path / "invalid.json"
    path.write_text(json.dumps({"playbooks": {"NBB": {"priority": 42, "min_confidence": 70}}}))
    with pytest.raises(ConfigError, match="Invalid playbook config"):
        load_playbook_config(path)


def test_unknown_playbook_in_config(tmp_path):
    path = tmp_path / "unknown.json"
    path.write_text(json.dumps({"playbooks": {"SILVER_BULLET": {"priority": 5, "min_confidence": 70}}}))
    with pytest.raises(ConfigError):
        load_playbook_config(path)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PLAYBOOK_AGENT_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PLAYBOOK_AGENT_LOOKBACK", "30")
    monkeypatch.setenv("PLAYBOOK_AGENT_LOG_TO_FILE", "false")
    settings = Settings()
    assert settings.log_level == "DEBUG"
    assert settings.lookback == 30
    assert settings.log_to_file is False


def test_settings_reject_short_lookback(monkeypatch):
    monkeypatch.setenv("PLAYBOOK_AGENT_LOOKBACK", "3")
    with pytest.raises(ValidationError):
        Settings()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    close_logging()
    root.handlers = handlers
    root.setLevel(level)


def test_setup_logging_writes_file(tmp_path, restore_root_logger):
    setup_logging(level="debug", log_dir=str(tmp_path), to_file=True)
    assert restore_root_logger.level == logging.DEBUG
    logging.getLogger("playbook_agent.test").info("hello from test")
    close_logging()
    text = (tmp_path / "playbook_agent.log").read_text()
    assert "[BOOT] Logging initialized" in text
    assert "INFO playbook_agent.test: hello from test" in text


def test_setup_logging_console_only(tmp_path, restore_root_logger):
    setup_logging(level="WARNING", log_dir=str(tmp_path / "unused"), to_file=False)
    assert not (tmp_path / "unused").exists()
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0], logging.StreamHandler)
