"""Contracts for the collaborators the engine is wired against.

The engine never owns storage, permissions or delivery. Anything that
implements these protocols can be plugged into :class:`ProjectEntityEngine`;
``pm_engine.stores`` ships in-memory and SQL implementations.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.common import AccessLevel, FileEntryType, TagType
from pm_shared.schemas.entities import ProjectEntity, ProjectRef
from pm_shared.schemas.files import FileId, FileRead, Tag
from pm_shared.schemas.recipients import Recipient


@runtime_checkable
class RecipientDirectory(Protocol):
    """Resolves recipient ids to users or groups."""

    @abstractmethod
    def get_recipient(self, recipient_id: str) -> Optional[Recipient]:
        """Return the recipient, or None when the id is unknown."""
        ...


@runtime_checkable
class SubscriptionStore(Protocol):
    """Per-action subscriptions plus explicit unsubscribe markers."""

    @abstractmethod
    def subscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        """Record a subscription, clearing any unsubscribe marker."""
        ...

    @abstractmethod
    def unsubscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        """Drop any subscription and record an unsubscribe marker."""
        ...

    @abstractmethod
    def get_subscriptions(self, action: str, recipient: Recipient) -> list[str]:
        """Topics the recipient is subscribed to for an action."""
        ...

    @abstractmethod
    def is_unsubscribed(self, action: str, topic: str, recipient: Recipient) -> bool:
        ...

    @abstractmethod
    def get_recipients(self, action: str, topic: str) -> list[Recipient]:
        """Subscribers of a topic, in subscription order."""
        ...


@runtime_checkable
class TagStore(Protocol):
    @abstractmethod
    def save_tag(self, tag: Tag) -> None:
        ...

    @abstractmethod
    def remove_tag(self, tag: Tag) -> None:
        ...

    @abstractmethod
    def get_tags(
        self,
        name: str,
        tag_type: TagType,
        entry_type: Optional[FileEntryType] = None,
    ) -> list[Tag]:
        ...


@runtime_checkable
class FileService(Protocol):
    """File storage operations the attachment linker relies on."""

    @abstractmethod
    def get_file(self, file_id: FileId) -> FileRead:
        """Load one file; raises FileNotFound when it does not exist."""
        ...

    @abstractmethod
    def get_files(self, file_ids: Iterable[FileId]) -> list[FileRead]:
        """Load the files that exist among ``file_ids``."""
        ...

    @abstractmethod
    def get_root(self, project_id: int) -> FileId:
        """Storage root folder of a project."""
        ...

    @abstractmethod
    def get_file_share(self, file: FileRead, project_id: int, actor_id: str) -> AccessLevel:
        ...

    @abstractmethod
    def generate_image_thumb(self, file: FileRead) -> None:
        ...

    @abstractmethod
    def set_thumb_urls(self, files: Sequence[FileRead]) -> None:
        ...


@runtime_checkable
class PermissionOracle(Protocol):
    @abstractmethod
    def can_read_files(self, project: ProjectRef, actor_id: str) -> bool:
        ...


@runtime_checkable
class CommentStore(Protocol):
    @abstractmethod
    def save_or_update(self, comment: Comment) -> Comment:
        """Persist a comment, assigning its id on first save."""
        ...


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Hands notifications to the delivery layer. Return values are ignored."""

    @abstractmethod
    def send_new_file(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        file_title: str,
    ) -> None:
        ...

    @abstractmethod
    def send_new_comment(
        self,
        recipients: Sequence[Recipient],
        entity: ProjectEntity,
        comment: Comment,
        is_new: bool,
    ) -> None:
        ...
