"""
Notification fan-out.

:class:`NotificationFanOut` is the only path from engine operations to a
:class:`NotificationDispatcher`. It honours the global disable switch, reads
the subscriber list at call time, and never lets a dispatcher failure reach
the caller: the write that triggered the notification has already happened.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from sqlalchemy.engine import Engine

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.entities import ProjectEntity
from pm_shared.schemas.recipients import Recipient

from .database import session_scope
from .metrics import MetricsCollector
from .models import NotificationEvent
from .protocols import NotificationDispatcher
from .subscriptions import SubscriptionRegistry

log = structlog.get_logger()

FILE_CREATED = "file.created"
COMMENT_CREATED = "comment.created"
COMMENT_UPDATED = "comment.updated"


class LoggingDispatcher:
    """Emits one structured log event per notification."""

    def send_new_file(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        file_title: str,
    ) -> None:
        log.info(
            "notify.new_file",
            topic=entity.notify_id,
            project_id=entity.project.id,
            file_title=file_title,
            recipients=[r.id for r in recipients],
        )

    def send_new_comment(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        comment: Comment,
        is_new: bool,
    ) -> None:
        log.info(
            "notify.new_comment",
            topic=entity.notify_id,
            project_id=entity.project.id,
            comment_id=str(comment.id),
            is_new=is_new,
            recipients=[r.id for r in recipients],
        )


class OutboxDispatcher:
    """Persists notifications to ``notification_events`` for a delivery worker."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _write(self, event_type: str, entity: ProjectEntity, recipients, payload: dict) -> None:
        with session_scope(self._engine) as session:
            session.add(
                NotificationEvent(
                    topic=entity.notify_id,
                    type=event_type,
                    recipient_ids=[r.id for r in recipients],
                    payload={
                        "entity_kind": entity.kind.value,
                        "entity_id": str(entity.id),
                        "entity_title": entity.title,
                        "project_id": entity.project.id,
                        **payload,
                    },
                )
            )

    def send_new_file(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        file_title: str,
    ) -> None:
        self._write(FILE_CREATED, entity, recipients, {"file_title": file_title})

    def send_new_comment(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        comment: Comment,
        is_new: bool,
    ) -> None:
        self._write(
            COMMENT_CREATED if is_new else COMMENT_UPDATED,
            entity,
            recipients,
            {
                "comment_id": str(comment.id),
                "author_id": comment.author_id,
                "body": comment.body,
            },
        )


class NotificationFanOut:
    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        registry: SubscriptionRegistry,
        disabled: bool = False,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._registry = registry
        self._disabled = disabled
        self._metrics = metrics

    @property
    def disabled(self) -> bool:
        return self._disabled

    def new_file(self, action: str, entity: ProjectEntity, file_title: str) -> None:
        if self._disabled:
            return
        self._send(
            "new_file",
            entity,
            lambda recipients: self._dispatcher.send_new_file(recipients, entity, file_title),
            action,
        )

    def new_comment(self, action: str, entity: ProjectEntity, comment: Comment, is_new: bool) -> None:
        if self._disabled:
            return
        self._send(
            "new_comment",
            entity,
            lambda recipients: self._dispatcher.send_new_comment(recipients, entity, comment, is_new),
            action,
        )

    def _send(self, kind: str, entity: ProjectEntity, call, action: str) -> None:
        try:
            call(self._registry.get_subscribers(action, entity.notify_id))
        except Exception:
            log.exception("notify.dispatch_failed", kind=kind, topic=entity.notify_id)
            if self._metrics:
                self._metrics.inc("notifications_failed_total")
            return
        if self._metrics:
            self._metrics.inc("notifications_sent_total")
