"""Tests for subscribe / unsubscribe / follow semantics."""

import uuid
from concurrent.futures import ThreadPoolExecutor

from pm_shared.schemas.common import EntityKind
from pm_shared.schemas.entities import ProjectEntity

from .conftest import PROJECT


class TestSubscribe:
    def test_subscribe_adds_recipient(self, engine, task):
        engine.subscribe(task, "u1")

        assert engine.is_subscribed(task, "u1") is True
        assert [r.id for r in engine.get_subscribers(task)] == ["u1"]

    def test_subscribe_twice_is_idempotent(self, engine, task):
        engine.subscribe(task, "u1")
        engine.subscribe(task, "u1")

        assert len(engine.get_subscribers(task)) == 1

    def test_unknown_recipient_is_a_silent_noop(self, engine, task):
        engine.subscribe(task, "ghost")
        engine.unsubscribe(task, "ghost")

        assert engine.get_subscribers(task) == []
        assert engine.is_subscribed(task, "ghost") is False
        assert engine.is_unsubscribed(task, "ghost") is False
        assert engine.follow(task, "ghost") is False

    def test_uuid_recipient_ids_match_their_string_form(self, factory, engine, task):
        user_id = uuid.uuid4()
        factory.directory.add_user(user_id, "Cy")

        engine.subscribe(task, user_id)

        assert engine.is_subscribed(task, str(user_id))

    def test_subscription_is_per_topic(self, engine, task):
        other = ProjectEntity(kind=EntityKind.TASK, id=124, project=PROJECT)
        engine.subscribe(task, "u1")

        assert engine.is_subscribed(other, "u1") is False


class TestUnsubscribeOverride:
    """An explicit unsubscribe wins over later subscribes."""

    def test_unsubscribe_then_subscribe_stays_unsubscribed(self, engine, task):
        engine.unsubscribe(task, "u1")
        engine.subscribe(task, "u1")

        assert engine.is_subscribed(task, "u1") is False
        assert engine.is_unsubscribed(task, "u1") is True

    def test_unsubscribe_removes_existing_subscription(self, engine, task):
        engine.subscribe(task, "u1")
        engine.unsubscribe(task, "u1")

        assert engine.get_subscribers(task) == []

    def test_unsubscribe_without_subscription_is_recorded(self, engine, task):
        engine.unsubscribe(task, "u2")
        engine.unsubscribe(task, "u2")

        assert engine.is_unsubscribed(task, "u2") is True
        assert engine.get_subscribers(task) == []

    def test_group_is_never_reported_unsubscribed(self, engine, task):
        engine.subscribe(task, "g1")
        engine.unsubscribe(task, "g1")

        assert engine.is_unsubscribed(task, "g1") is False
        assert engine.is_subscribed(task, "g1") is False

        engine.subscribe(task, "g1")
        assert engine.is_subscribed(task, "g1") is True

    def test_override_is_scoped_to_action(self, factory, task):
        registry = factory.registry
        registry.unsubscribe("new_task_comment", task.notify_id, "u1")
        registry.subscribe("task_closed", task.notify_id, "u1")

        assert registry.is_subscribed("task_closed", task.notify_id, "u1") is True
        assert registry.is_subscribed("new_task_comment", task.notify_id, "u1") is False


class TestIsSubscribed:
    def test_topic_comparison_ignores_case(self, factory):
        factory.registry.subscribe("new_task_comment", "Task123", "u1")

        assert factory.registry.is_subscribed("new_task_comment", "task123", "u1") is True
        assert factory.registry.is_subscribed("new_task_comment", "TASK123", "u1") is True

    def test_follow_unsubscribes_differently_cased_topic(self, factory):
        factory.registry.subscribe("new_task_comment", "Task123", "u1")

        assert factory.registry.follow("new_task_comment", "TASK123", "u1") is False
        assert factory.registry.is_subscribed("new_task_comment", "task123", "u1") is False
        assert factory.registry.get_subscribers("new_task_comment", "Task123") == []


class TestFollow:
    def test_follow_toggles(self, engine, task):
        assert engine.follow(task, "u1") is True
        assert engine.is_subscribed(task, "u1") is True

        assert engine.follow(task, "u1") is False
        assert engine.is_subscribed(task, "u1") is False

    def test_follow_twice_restores_subscribed_state(self, engine, task):
        engine.subscribe(task, "u1")

        engine.follow(task, "u1")
        engine.follow(task, "u1")

        assert engine.is_subscribed(task, "u1") is True

    def test_follow_twice_restores_unsubscribed_state(self, engine, task):
        engine.follow(task, "u1")
        engine.follow(task, "u1")

        assert engine.is_subscribed(task, "u1") is False

    def test_follow_after_unsubscribe_resubscribes(self, engine, task):
        engine.unsubscribe(task, "u1")

        assert engine.follow(task, "u1") is True
        assert engine.is_subscribed(task, "u1") is True
        assert engine.is_unsubscribed(task, "u1") is False

    def test_unfollow_marks_unsubscribed(self, engine, task):
        engine.subscribe(task, "u1")
        engine.follow(task, "u1")

        engine.subscribe(task, "u1")
        assert engine.is_subscribed(task, "u1") is False


class TestSubscribers:
    def test_subscribers_come_back_in_subscription_order(self, engine, task):
        engine.subscribe(task, "u2")
        engine.subscribe(task, "g1")
        engine.subscribe(task, "u1")

        assert [r.id for r in engine.get_subscribers(task)] == ["u2", "g1", "u1"]

    def test_resubscribe_moves_recipient_to_the_back(self, engine, task):
        engine.subscribe(task, "u1")
        engine.subscribe(task, "u2")
        engine.follow(task, "u1")
        engine.follow(task, "u1")

        assert [r.id for r in engine.get_subscribers(task)] == ["u2", "u1"]

    def test_concurrent_subscribes_are_all_kept(self, factory, engine, task):
        user_ids = [f"user-{i}" for i in range(50)]
        for user_id in user_ids:
            factory.directory.add_user(user_id)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda u: engine.subscribe(task, u), user_ids))

        assert {r.id for r in engine.get_subscribers(task)} == set(user_ids)
