"""
Engine configuration.

Values come from ``PM_``-prefixed environment variables (and ``.env``), or
from a YAML file via :func:`load_config`.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pm_shared.schemas.common import EntityKind

from .errors import ConfigError


def _default_notify_actions() -> dict[EntityKind, str]:
    return {
        EntityKind.TASK: "new_task_comment",
        EntityKind.SUBTASK: "new_subtask_comment",
        EntityKind.MILESTONE: "new_milestone_comment",
        EntityKind.DISCUSSION: "new_discussion_comment",
    }


class LoggingConfig(BaseModel):
    level: str = "info"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    """Notification engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PM_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Notifications
    disable_notifications: bool = False
    notify_actions: dict[EntityKind, str] = Field(default_factory=_default_notify_actions)

    # Storage
    store_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite:///./data/pm_engine.db"
    database_echo: bool = False

    # Files
    thumbnail_base_url: str = "/files"

    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> Settings:
    """Load and validate engine configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return Settings(**raw)
    except (yaml.YAMLError, ValidationError, TypeError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    return Settings()
