"""
In-memory implementations of the collaborator protocols.

Used for the ``memory`` store backend and throughout the test suite. Each
store guards its own read/modify/write steps with a lock, so engines on
several request threads can share one instance.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.common import AccessLevel, FileEntryType, RecipientKind, TagType, ThumbnailStatus
from pm_shared.schemas.entities import ProjectRef
from pm_shared.schemas.files import FileId, FileRead, Tag, file_key
from pm_shared.schemas.recipients import Recipient, recipient_key

from ..errors import FileNotFound


class InMemoryRecipientDirectory:
    def __init__(self, recipients: Iterable[Recipient] = ()) -> None:
        self._recipients: dict[str, Recipient] = {}
        self._lock = threading.Lock()
        for recipient in recipients:
            self.add(recipient)

    def add(self, recipient: Recipient) -> Recipient:
        with self._lock:
            self._recipients[recipient.id] = recipient
        return recipient

    def add_user(self, recipient_id, name: str | None = None) -> Recipient:
        return self.add(Recipient(id=recipient_key(recipient_id), name=name))

    def add_group(self, recipient_id, name: str | None = None) -> Recipient:
        return self.add(
            Recipient(id=recipient_key(recipient_id), name=name, kind=RecipientKind.GROUP)
        )

    def remove(self, recipient_id) -> None:
        with self._lock:
            self._recipients.pop(recipient_key(recipient_id), None)

    def get_recipient(self, recipient_id) -> Optional[Recipient]:
        return self._recipients.get(recipient_key(recipient_id))


class InMemorySubscriptionStore:
    """Subscriptions keyed by (action, topic); insertion order is subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[tuple[str, str], dict[str, Recipient]] = {}
        self._unsubscribed: set[tuple[str, str, str]] = set()
        self._lock = threading.Lock()

    def subscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        with self._lock:
            self._unsubscribed.discard((action, topic, recipient.id))
            self._subscribers.setdefault((action, topic), {}).setdefault(recipient.id, recipient)

    def unsubscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        with self._lock:
            subscribers = self._subscribers.get((action, topic))
            if subscribers is not None:
                subscribers.pop(recipient.id, None)
                if not subscribers:
                    del self._subscribers[(action, topic)]
            self._unsubscribed.add((action, topic, recipient.id))

    def get_subscriptions(self, action: str, recipient: Recipient) -> list[str]:
        with self._lock:
            return [
                topic
                for (sub_action, topic), subscribers in self._subscribers.items()
                if sub_action == action and recipient.id in subscribers
            ]

    def is_unsubscribed(self, action: str, topic: str, recipient: Recipient) -> bool:
        return (action, topic, recipient.id) in self._unsubscribed

    def get_recipients(self, action: str, topic: str) -> list[Recipient]:
        with self._lock:
            return list(self._subscribers.get((action, topic), {}).values())


class InMemoryTagStore:
    def __init__(self) -> None:
        self._tags: dict[tuple[str, TagType], dict[Tag, None]] = {}
        self._lock = threading.Lock()

    def save_tag(self, tag: Tag) -> None:
        with self._lock:
            self._tags.setdefault((tag.name, tag.tag_type), {})[tag] = None

    def remove_tag(self, tag: Tag) -> None:
        with self._lock:
            tags = self._tags.get((tag.name, tag.tag_type))
            if tags is not None:
                tags.pop(tag, None)

    def get_tags(
        self,
        name: str,
        tag_type: TagType,
        entry_type: Optional[FileEntryType] = None,
    ) -> list[Tag]:
        with self._lock:
            tags = list(self._tags.get((name, tag_type), {}))
        if entry_type is None:
            return tags
        return [t for t in tags if t.entry_type == entry_type]


class InMemoryFileService:
    """
    Minimal file storage: files, project roots and per-user shares.

    ``move_file`` relocates a file under another root, which is what breaks
    attachment links from the entity's side.
    """

    def __init__(self, thumbnail_base_url: str = "/files") -> None:
        self._files: dict[str, FileRead] = {}
        self._roots: dict[int, str] = {}
        self._shares: dict[tuple[str, str], AccessLevel] = {}
        self._thumbnail_base_url = thumbnail_base_url.rstrip("/")
        self._lock = threading.Lock()

    # --- Setup ---

    def set_root(self, project_id: int, root_folder_id: FileId) -> None:
        with self._lock:
            self._roots[project_id] = file_key(root_folder_id)

    def add_file(self, file: FileRead) -> FileRead:
        with self._lock:
            self._files[file_key(file.id)] = file.model_copy()
        return file

    def move_file(self, file_id: FileId, folder_id: FileId, root_folder_id: FileId) -> None:
        with self._lock:
            key = file_key(file_id)
            if key not in self._files:
                raise FileNotFound(file_id)
            self._files[key] = self._files[key].model_copy(
                update={"folder_id": folder_id, "root_folder_id": root_folder_id}
            )

    def share(self, file_id: FileId, subject_id, access: AccessLevel) -> None:
        with self._lock:
            self._shares[(file_key(file_id), recipient_key(subject_id))] = access

    # --- FileService ---

    def get_file(self, file_id: FileId) -> FileRead:
        file = self._files.get(file_key(file_id))
        if file is None:
            raise FileNotFound(file_id)
        return file.model_copy()

    def get_files(self, file_ids: Iterable[FileId]) -> list[FileRead]:
        with self._lock:
            return [
                self._files[key].model_copy()
                for key in map(file_key, file_ids)
                if key in self._files
            ]

    def get_root(self, project_id: int) -> FileId:
        root = self._roots.get(project_id)
        if root is None:
            # Projects get a root folder the first time one is asked for.
            with self._lock:
                root = self._roots.setdefault(project_id, f"project-{project_id}")
        return root

    def get_file_share(self, file: FileRead, project_id: int, actor_id) -> AccessLevel:
        return self._shares.get(
            (file_key(file.id), recipient_key(actor_id)), AccessLevel.READ
        )

    def generate_image_thumb(self, file: FileRead) -> None:
        status = ThumbnailStatus.CREATED if file.is_image else ThumbnailStatus.NOT_REQUIRED
        with self._lock:
            stored = self._files.get(file_key(file.id))
            if stored is not None:
                self._files[file_key(file.id)] = stored.model_copy(
                    update={"thumbnail_status": status}
                )
        file.thumbnail_status = status

    def set_thumb_urls(self, files: Sequence[FileRead]) -> None:
        for file in files:
            if file.thumbnail_status == ThumbnailStatus.CREATED:
                file.thumbnail_url = (
                    f"{self._thumbnail_base_url}/{file.id}/thumb?version={file.version}"
                )


class StaticPermissionOracle:
    """Grants file access per (project, actor) pair, or to everyone on a project."""

    def __init__(self, allow_all: bool = False) -> None:
        self._allow_all = allow_all
        self._grants: set[tuple[int, str]] = set()
        self._public_projects: set[int] = set()
        self._lock = threading.Lock()

    def grant(self, project_id: int, actor_id) -> None:
        with self._lock:
            self._grants.add((project_id, recipient_key(actor_id)))

    def revoke(self, project_id: int, actor_id) -> None:
        with self._lock:
            self._grants.discard((project_id, recipient_key(actor_id)))

    def open_project(self, project_id: int) -> None:
        with self._lock:
            self._public_projects.add(project_id)

    def can_read_files(self, project: ProjectRef, actor_id) -> bool:
        if self._allow_all or project.id in self._public_projects:
            return True
        return (project.id, recipient_key(actor_id)) in self._grants


class InMemoryCommentStore:
    def __init__(self) -> None:
        self._comments: dict[uuid.UUID, Comment] = {}
        self._lock = threading.Lock()

    def save_or_update(self, comment: Comment) -> Comment:
        now = datetime.now(timezone.utc)
        with self._lock:
            if comment.id is None:
                comment.id = uuid.uuid4()
                comment.created_at = now
            comment.updated_at = now
            self._comments[comment.id] = comment.model_copy()
        return comment

    def get(self, comment_id: uuid.UUID) -> Optional[Comment]:
        comment = self._comments.get(comment_id)
        return comment.model_copy() if comment else None

    def list_for_target(self, target_uniq_id: str) -> list[Comment]:
        with self._lock:
            return [
                c.model_copy()
                for c in self._comments.values()
                if c.target_uniq_id == target_uniq_id and not c.inactive
            ]
