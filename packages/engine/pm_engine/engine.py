"""
Per-entity-kind facade over subscriptions, file attachments and comments.
"""

from __future__ import annotations

from typing import Optional

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.entities import ProjectEntity
from pm_shared.schemas.files import FileId, FileRead
from pm_shared.schemas.recipients import Recipient

from .attachments import FileAttachmentLinker
from .comments import CommentCoordinator
from .dispatch import NotificationFanOut
from .subscriptions import SubscriptionRegistry


class ProjectEntityEngine:
    """
    Everything a caller needs to follow, attach files to, and comment on
    one kind of project entity.

    The engine is bound to a single notify action and keeps no state of its
    own, so one instance can serve concurrent requests. Operations that act
    for a user take that user's id explicitly.
    """

    def __init__(
        self,
        notify_action: str,
        registry: SubscriptionRegistry,
        attachments: FileAttachmentLinker,
        comments: CommentCoordinator,
        fan_out: NotificationFanOut,
    ) -> None:
        self._action = notify_action
        self._fan_out = fan_out
        self._registry = registry
        self._attachments = attachments
        self._comments = comments

    @property
    def notify_action(self) -> str:
        return self._action

    @property
    def notifications_disabled(self) -> bool:
        return self._fan_out.disabled

    # --- Subscription ---

    def subscribe(self, entity: ProjectEntity, recipient_id) -> None:
        self._registry.subscribe(self._action, entity.notify_id, recipient_id)

    def unsubscribe(self, entity: ProjectEntity, recipient_id) -> None:
        self._registry.unsubscribe(self._action, entity.notify_id, recipient_id)

    def is_subscribed(self, entity: ProjectEntity, recipient_id) -> bool:
        return self._registry.is_subscribed(self._action, entity.notify_id, recipient_id)

    def is_unsubscribed(self, entity: ProjectEntity, recipient_id) -> bool:
        return self._registry.is_unsubscribed(self._action, entity.notify_id, recipient_id)

    def follow(self, entity: ProjectEntity, recipient_id) -> bool:
        return self._registry.follow(self._action, entity.notify_id, recipient_id)

    def get_subscribers(self, entity: ProjectEntity) -> list[Recipient]:
        return self._registry.get_subscribers(self._action, entity.notify_id)

    # --- Files ---

    def get_files(self, entity: Optional[ProjectEntity], actor_id) -> list[FileRead]:
        return self._attachments.list_files(entity, actor_id)

    def attach_file(
        self,
        entity: ProjectEntity,
        file_id: FileId,
        actor_id,
        notify: bool = True,
    ) -> Optional[FileRead]:
        return self._attachments.attach(self._action, entity, file_id, actor_id, notify)

    def detach_file(self, entity: ProjectEntity, file_id: FileId, actor_id) -> None:
        self._attachments.detach(entity, file_id, actor_id)

    # --- Comments ---

    def save_or_update_comment(self, entity: ProjectEntity, comment: Comment, actor_id) -> Comment:
        return self._comments.save_or_update_comment(self._action, entity, comment, actor_id)
