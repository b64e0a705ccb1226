"""
Configuration for the playbook agent.

Two layers live here:

* ``Settings`` - process settings read from the environment (and an
  optional ``.env`` file) via pydantic-settings.
* ``PlaybooksConfig`` - the per-playbook enable/priority/min-confidence
  table. It is an explicit value handed to ``classify()``; loading and
  validating it happens once, at the edge, in ``load_playbook_config``.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from playbook_agent.playbooks import Playbook

load_dotenv()


class ConfigError(ValueError):
    """Raised when a playbook configuration cannot be loaded or is invalid."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PLAYBOOK_AGENT_", env_file=".env", extra="ignore")

    log_level: str = Field("INFO")
    log_dir: str = Field("logs")
    log_to_file: bool = Field(True)
    playbooks_config_path: Optional[str] = Field(None)
    lookback: int = Field(50, ge=5)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class PlaybookConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    priority: int = Field(ge=1, le=10)
    min_confidence: float = Field(ge=0, le=100)
    description: str = ""


class PlaybooksConfig(BaseModel):
    """Per-playbook configuration table.

    Priorities must be unique across all playbooks (enabled or not) so
    that classification order is never ambiguous.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    playbooks: Dict[Playbook, PlaybookConfig]

    @model_validator(mode="after")
    def _unique_priorities(self) -> "PlaybooksConfig":
        seen: Dict[int, Playbook] = {}
        for playbook, cfg in self.playbooks.items():
            if cfg.priority in seen:
                raise ValueError(
                    f"duplicate priority {cfg.priority} for "
                    f"{seen[cfg.priority].value} and {playbook.value}"
                )
            seen[cfg.priority] = playbook
        return self

    def get(self, playbook: Playbook) -> Optional[PlaybookConfig]:
        return self.playbooks.get(playbook)

    def ordered(self) -> List[tuple]:
        """Enabled playbooks as ``(playbook, config)`` pairs, lowest priority first."""
        enabled = [(pb, cfg) for pb, cfg in self.playbooks.items() if cfg.enabled]
        return sorted(enabled, key=lambda item: item[1].priority)

    def with_overrides(self, playbook: Playbook, **changes) -> "PlaybooksConfig":
        """Return a copy with one playbook's settings replaced."""
        current = self.playbooks[playbook]
        updated = dict(self.playbooks)
        updated[playbook] = current.model_copy(update=changes)
        return PlaybooksConfig(playbooks=updated)


DEFAULT_PLAYBOOKS: Dict[Playbook, Dict[str, object]] = {
    Playbook.NBB: {
        "priority": 1,
        "min_confidence": 70,
        "description": "HTF bias, PO3 zone, sweep, structure break, displacement and OTE",
    },
    Playbook.JADECAP: {
        "priority": 2,
        "min_confidence": 65,
        "description": "Session liquidity sweep reversal during New York",
    },
    Playbook.TORI: {
        "priority": 3,
        "min_confidence": 70,
        "description": "Respected higher-timeframe trendline continuation",
    },
    Playbook.FABIO: {
        "priority": 4,
        "min_confidence": 65,
        "description": "Balance to imbalance auction transition",
    },
}


def default_playbooks_config() -> PlaybooksConfig:
    return PlaybooksConfig(
        playbooks={pb: PlaybookConfig(**values) for pb, values in DEFAULT_PLAYBOOKS.items()}
    )


def load_playbook_config(path: Union[str, Path]) -> PlaybooksConfig:
    """
    Load and validate a playbook configuration file.

    The file is JSON shaped like ``config/playbooks.json``::

        {"playbooks": {"NBB": {"enabled": true, "priority": 1, "min_confidence": 70}}}

    Playbooks missing from the file are left out of the table and
    therefore never evaluated.

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation.
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Playbook config not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Playbook config is not valid JSON: {path}: {e}") from e

    try:
        return PlaybooksConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid playbook config {path}: {e}") from e
