"""Saving comments on project entities."""

from __future__ import annotations

import structlog

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.entities import ProjectEntity

from .dispatch import NotificationFanOut
from .errors import CommentTargetMismatch
from .protocols import CommentStore
from .subscriptions import SubscriptionRegistry

log = structlog.get_logger()


class CommentCoordinator:
    def __init__(
        self,
        store: CommentStore,
        registry: SubscriptionRegistry,
        fan_out: NotificationFanOut,
    ) -> None:
        self._store = store
        self._registry = registry
        self._fan_out = fan_out

    def save_or_update_comment(
        self,
        action: str,
        entity: ProjectEntity,
        comment: Comment,
        actor_id,
    ) -> Comment:
        """
        Persist ``comment`` and notify the entity's subscribers.

        Store errors propagate before anything is sent. The actor then
        follows the entity unless they explicitly unsubscribed earlier.
        """
        if comment.target_uniq_id is None:
            comment.target_uniq_id = entity.notify_id
        elif comment.target_uniq_id != entity.notify_id:
            raise CommentTargetMismatch(comment.target_uniq_id, entity.notify_id)

        is_new = comment.is_new
        comment = self._store.save_or_update(comment)
        log.info(
            "comments.saved",
            topic=entity.notify_id,
            comment_id=str(comment.id),
            is_new=is_new,
        )

        self._fan_out.new_comment(action, entity, comment, is_new)
        self._registry.subscribe(action, entity.notify_id, actor_id)
        return comment
