"""
Builds engines from settings.

One factory owns one set of collaborators (stores, file service, permission
oracle, dispatcher) and hands out a :class:`ProjectEntityEngine` per entity
kind, each bound to that kind's notify action.
"""

from __future__ import annotations

from typing import Optional

import structlog

from pm_shared.schemas.common import EntityKind

from .attachments import FileAttachmentLinker
from .comments import CommentCoordinator
from .config import Settings, get_settings
from .database import create_db_engine, init_db
from .dispatch import LoggingDispatcher, NotificationFanOut, OutboxDispatcher
from .engine import ProjectEntityEngine
from .errors import UnknownEntityKind
from .logging_config import configure_logging
from .metrics import MetricsCollector
from .protocols import (
    CommentStore,
    FileService,
    NotificationDispatcher,
    PermissionOracle,
    RecipientDirectory,
    SubscriptionStore,
    TagStore,
)
from .recipients import RecipientResolver
from .stores import memory, sql
from .subscriptions import SubscriptionRegistry

log = structlog.get_logger()


class EngineFactory:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        directory: Optional[RecipientDirectory] = None,
        subscriptions: Optional[SubscriptionStore] = None,
        tags: Optional[TagStore] = None,
        files: Optional[FileService] = None,
        permissions: Optional[PermissionOracle] = None,
        comments: Optional[CommentStore] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        settings = settings or get_settings()
        configure_logging(settings.logging.level, settings.logging.format)
        self.settings = settings
        self.metrics = metrics or MetricsCollector()
        self.db_engine = None

        if settings.store_backend == "sql":
            self.db_engine = create_db_engine(settings)
            init_db(self.db_engine)
            self.directory = directory or sql.SqlRecipientDirectory(self.db_engine)
            self.subscriptions = subscriptions or sql.SqlSubscriptionStore(self.db_engine)
            self.tags = tags or sql.SqlTagStore(self.db_engine)
            self.files = files or sql.SqlFileService(self.db_engine, settings.thumbnail_base_url)
            self.comments = comments or sql.SqlCommentStore(self.db_engine)
            self.dispatcher = dispatcher or OutboxDispatcher(self.db_engine)
        else:
            self.directory = directory or memory.InMemoryRecipientDirectory()
            self.subscriptions = subscriptions or memory.InMemorySubscriptionStore()
            self.tags = tags or memory.InMemoryTagStore()
            self.files = files or memory.InMemoryFileService(settings.thumbnail_base_url)
            self.comments = comments or memory.InMemoryCommentStore()
            self.dispatcher = dispatcher or LoggingDispatcher()

        # Without an oracle nobody can touch files.
        self.permissions = permissions or memory.StaticPermissionOracle()

        self.registry = SubscriptionRegistry(self.subscriptions, RecipientResolver(self.directory))
        self.fan_out = NotificationFanOut(
            self.dispatcher,
            self.registry,
            disabled=settings.disable_notifications,
            metrics=self.metrics,
        )
        self._attachments = FileAttachmentLinker(
            self.tags, self.files, self.permissions, self.fan_out, self.metrics
        )
        self._comments = CommentCoordinator(self.comments, self.registry, self.fan_out)
        self._engines: dict[EntityKind, ProjectEntityEngine] = {}

        log.info(
            "factory.ready",
            backend=settings.store_backend,
            notifications_disabled=settings.disable_notifications,
        )

    @property
    def disable_notifications(self) -> bool:
        return self.fan_out.disabled

    def stats(self) -> dict[str, int]:
        """Current engine counters, e.g. for a host service's health endpoint."""
        return self.metrics.snapshot()

    def metrics_text(self) -> str:
        return self.metrics.to_prometheus()

    def get_engine(self, kind: EntityKind | str) -> ProjectEntityEngine:
        try:
            kind = EntityKind(kind)
        except ValueError:
            raise UnknownEntityKind(kind) from None

        engine = self._engines.get(kind)
        if engine is None:
            action = self.settings.notify_actions.get(kind)
            if action is None:
                raise UnknownEntityKind(kind)
            engine = ProjectEntityEngine(
                action, self.registry, self._attachments, self._comments, self.fan_out
            )
            self._engines[kind] = engine
        return engine

    def close(self) -> None:
        if self.db_engine is not None:
            self.db_engine.dispose()
            self.db_engine = None
