"""Tests for configuration loading and logging setup."""

import pytest
import structlog
import yaml

from pm_engine.config import Settings, load_config
from pm_engine.errors import ConfigError, UnknownEntityKind
from pm_engine.factory import EngineFactory
from pm_engine.logging_config import configure_logging
from pm_shared.schemas.common import EntityKind


def test_load_config_from_yaml(tmp_path):
    config_data = {
        "disable_notifications": True,
        "store_backend": "sql",
        "database_url": "sqlite:///./var/engine.db",
        "notify_actions": {"Task": "task_updates"},
        "logging": {"level": "debug", "format": "text"},
    }
    path = tmp_path / "engine.yaml"
    path.write_text(yaml.dump(config_data))

    cfg = load_config(path)
    assert cfg.disable_notifications is True
    assert cfg.store_backend == "sql"
    assert cfg.notify_actions == {EntityKind.TASK: "task_updates"}
    assert cfg.logging.format == "text"


def test_load_config_defaults():
    cfg = Settings()
    assert cfg.disable_notifications is False
    assert cfg.store_backend == "memory"
    assert cfg.notify_actions[EntityKind.MILESTONE] == "new_milestone_comment"
    assert cfg.logging.level == "info"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PM_DISABLE_NOTIFICATIONS", "true")
    monkeypatch.setenv("PM_THUMBNAIL_BASE_URL", "https://cdn.example.com/files")

    cfg = Settings()
    assert cfg.disable_notifications is True
    assert cfg.thumbnail_base_url == "https://cdn.example.com/files"


def test_load_config_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path.yaml")


def test_load_config_invalid_value(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text(yaml.dump({"store_backend": "redis"}))

    with pytest.raises(ConfigError):
        load_config(path)


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text("")

    assert load_config(path).store_backend == "memory"


def test_kind_without_action_is_rejected(tmp_path):
    path = tmp_path / "engine.yaml"
    path.write_text(yaml.dump({"notify_actions": {"Task": "task_updates"}}))
    factory = EngineFactory(load_config(path))

    assert factory.get_engine(EntityKind.TASK).notify_action == "task_updates"
    with pytest.raises(UnknownEntityKind):
        factory.get_engine(EntityKind.MILESTONE)


@pytest.mark.parametrize("fmt", ["json", "text"])
def test_configure_logging(fmt):
    try:
        configure_logging("warning", fmt)
        assert structlog.is_configured()
    finally:
        structlog.reset_defaults()
