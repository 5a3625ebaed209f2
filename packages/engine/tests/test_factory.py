"""Tests for wiring engines through the factory."""

import pytest
import structlog

from pm_engine.config import LoggingConfig, Settings, get_settings
from pm_engine.dispatch import LoggingDispatcher
from pm_engine.errors import UnknownEntityKind
from pm_engine.factory import EngineFactory
from pm_engine.stores.memory import InMemorySubscriptionStore
from pm_shared.schemas.comments import Comment
from pm_shared.schemas.common import EntityKind
from pm_shared.schemas.entities import ProjectEntity

from .conftest import PROJECT


class TestEngineFactory:
    def test_memory_backend_defaults(self):
        factory = EngineFactory(Settings())

        assert isinstance(factory.subscriptions, InMemorySubscriptionStore)
        assert isinstance(factory.dispatcher, LoggingDispatcher)
        assert factory.db_engine is None
        assert factory.disable_notifications is False

    def test_engine_per_kind_is_cached(self, factory):
        assert factory.get_engine(EntityKind.TASK) is factory.get_engine("Task")

    def test_each_kind_uses_its_own_action(self, factory):
        assert factory.get_engine(EntityKind.TASK).notify_action == "new_task_comment"
        assert factory.get_engine(EntityKind.DISCUSSION).notify_action == "new_discussion_comment"

    def test_unknown_kind(self, factory):
        with pytest.raises(UnknownEntityKind):
            factory.get_engine("Epic")

    def test_actions_partition_subscriptions(self, factory, task):
        discussion = ProjectEntity(kind=EntityKind.DISCUSSION, id=123, project=PROJECT)
        task_engine = factory.get_engine(EntityKind.TASK)
        discussion_engine = factory.get_engine(EntityKind.DISCUSSION)

        task_engine.subscribe(task, "u1")
        discussion_engine.unsubscribe(discussion, "u1")

        assert task_engine.is_subscribed(task, "u1") is True
        assert discussion_engine.is_subscribed(discussion, "u1") is False
        assert [r.id for r in task_engine.get_subscribers(task)] == ["u1"]

    def test_no_permission_oracle_means_no_file_access(self, task):
        factory = EngineFactory(Settings())
        factory.directory.add_user("u1")

        assert factory.permissions.can_read_files(task.project, "u1") is False
        assert factory.get_engine(EntityKind.TASK).get_files(task, "u1") == []

    def test_settings_default_to_environment(self, monkeypatch):
        monkeypatch.setenv("PM_DISABLE_NOTIFICATIONS", "true")
        get_settings.cache_clear()
        try:
            factory = EngineFactory()
            assert factory.disable_notifications is True
        finally:
            get_settings.cache_clear()

    def test_factory_configures_logging(self):
        structlog.reset_defaults()
        try:
            EngineFactory(Settings(logging=LoggingConfig(level="warning", format="text")))
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()

    def test_stats_reflect_fan_out(self, task):
        factory = EngineFactory(Settings())
        factory.directory.add_user("u1")
        engine = factory.get_engine(EntityKind.TASK)
        engine.subscribe(task, "u1")

        engine.save_or_update_comment(task, Comment(body="hi", author_id="u1"), actor_id="u1")

        assert factory.stats()["notifications_sent_total"] == 1
        assert "pm_engine_notifications_sent_total 1" in factory.metrics_text()
