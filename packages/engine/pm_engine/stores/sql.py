"""
SQLModel-backed implementations of the collaborator protocols.

Every public call runs in its own transaction (:func:`session_scope`), which
is what gives subscribe/unsubscribe and tag add/remove their atomicity.
Composite primary keys keep a single row per subscription and per tag, so
concurrent writers on the same row end up last-writer-wins.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from pm_shared.schemas.comments import Comment
from pm_shared.schemas.common import AccessLevel, FileEntryType, RecipientKind, TagType, ThumbnailStatus
from pm_shared.schemas.files import FileId, FileRead, Tag, file_key
from pm_shared.schemas.recipients import Recipient, recipient_key

from ..database import session_scope
from ..errors import FileNotFound
from ..models.base import _utcnow
from ..models import (
    CommentRecord,
    DirectoryEntry,
    FileShare,
    FileTag,
    ProjectRoot,
    StoredFile,
    Subscription,
)

log = structlog.get_logger()


def _to_recipient(entry: DirectoryEntry) -> Recipient:
    return Recipient(id=entry.id, name=entry.name, kind=RecipientKind(entry.kind))


def _to_file(row: StoredFile) -> FileRead:
    return FileRead(
        id=row.id,
        title=row.title,
        folder_id=row.folder_id,
        root_folder_id=row.root_folder_id,
        content_type=row.content_type,
        version=row.version,
        thumbnail_status=ThumbnailStatus(row.thumbnail_status),
    )


class SqlRecipientDirectory:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def add(self, recipient: Recipient) -> Recipient:
        with session_scope(self._engine) as session:
            session.merge(
                DirectoryEntry(id=recipient.id, name=recipient.name, kind=recipient.kind.value)
            )
        return recipient

    def remove(self, recipient_id) -> None:
        with session_scope(self._engine) as session:
            entry = session.get(DirectoryEntry, recipient_key(recipient_id))
            if entry is not None:
                entry.removed = True
                session.add(entry)

    def get_recipient(self, recipient_id) -> Optional[Recipient]:
        with session_scope(self._engine) as session:
            entry = session.get(DirectoryEntry, recipient_key(recipient_id))
            if entry is None or entry.removed:
                return None
            return _to_recipient(entry)


class SqlSubscriptionStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _set(self, action: str, topic: str, recipient: Recipient, subscribed: bool) -> None:
        with session_scope(self._engine) as session:
            row = session.get(Subscription, (action, topic, recipient.id))
            if row is None:
                session.add(
                    Subscription(
                        action=action,
                        topic=topic,
                        recipient_id=recipient.id,
                        recipient_name=recipient.name,
                        recipient_kind=recipient.kind.value,
                        subscribed=subscribed,
                    )
                )
            elif row.subscribed != subscribed:
                row.subscribed = subscribed
                if subscribed:
                    # A renewed subscription goes to the back of the list.
                    row.created_at = _utcnow()
                row.recipient_name = recipient.name
                row.recipient_kind = recipient.kind.value
                session.add(row)

    def subscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        self._set(action, topic, recipient, True)

    def unsubscribe(self, action: str, topic: str, recipient: Recipient) -> None:
        self._set(action, topic, recipient, False)

    def get_subscriptions(self, action: str, recipient: Recipient) -> list[str]:
        with session_scope(self._engine) as session:
            result = session.exec(
                select(Subscription.topic).where(
                    Subscription.action == action,
                    Subscription.recipient_id == recipient.id,
                    Subscription.subscribed == True,  # noqa: E712
                )
            )
            return list(result.all())

    def is_unsubscribed(self, action: str, topic: str, recipient: Recipient) -> bool:
        with session_scope(self._engine) as session:
            row = session.get(Subscription, (action, topic, recipient.id))
            return row is not None and not row.subscribed

    def get_recipients(self, action: str, topic: str) -> list[Recipient]:
        with session_scope(self._engine) as session:
            rows = session.exec(
                select(Subscription)
                .where(
                    Subscription.action == action,
                    Subscription.topic == topic,
                    Subscription.subscribed == True,  # noqa: E712
                )
                .order_by(Subscription.created_at, Subscription.recipient_id)
            ).all()
            return [
                Recipient(
                    id=row.recipient_id,
                    name=row.recipient_name,
                    kind=RecipientKind(row.recipient_kind),
                )
                for row in rows
            ]


class SqlTagStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save_tag(self, tag: Tag) -> None:
        with session_scope(self._engine) as session:
            key = (tag.name, tag.tag_type.value, tag.entry_type.value, tag.entry_id)
            if session.get(FileTag, key) is None:
                session.add(
                    FileTag(
                        name=tag.name,
                        tag_type=tag.tag_type.value,
                        entry_type=tag.entry_type.value,
                        entry_id=tag.entry_id,
                    )
                )

    def remove_tag(self, tag: Tag) -> None:
        with session_scope(self._engine) as session:
            row = session.get(
                FileTag, (tag.name, tag.tag_type.value, tag.entry_type.value, tag.entry_id)
            )
            if row is not None:
                session.delete(row)

    def get_tags(
        self,
        name: str,
        tag_type: TagType,
        entry_type: Optional[FileEntryType] = None,
    ) -> list[Tag]:
        query = select(FileTag).where(FileTag.name == name, FileTag.tag_type == tag_type.value)
        if entry_type is not None:
            query = query.where(FileTag.entry_type == entry_type.value)
        with session_scope(self._engine) as session:
            rows = session.exec(query.order_by(FileTag.created_at)).all()
            return [
                Tag(
                    name=row.name,
                    tag_type=TagType(row.tag_type),
                    entry_type=FileEntryType(row.entry_type),
                    entry_id=row.entry_id,
                )
                for row in rows
            ]


class SqlFileService:
    def __init__(self, engine: Engine, thumbnail_base_url: str = "/files") -> None:
        self._engine = engine
        self._thumbnail_base_url = thumbnail_base_url.rstrip("/")

    # --- Setup ---

    def set_root(self, project_id: int, root_folder_id: FileId) -> None:
        with session_scope(self._engine) as session:
            session.merge(ProjectRoot(project_id=project_id, root_folder_id=file_key(root_folder_id)))

    def add_file(self, file: FileRead) -> FileRead:
        with session_scope(self._engine) as session:
            session.merge(
                StoredFile(
                    id=file_key(file.id),
                    title=file.title,
                    folder_id=file_key(file.folder_id),
                    root_folder_id=file_key(file.root_folder_id),
                    content_type=file.content_type,
                    version=file.version,
                    thumbnail_status=file.thumbnail_status.value,
                )
            )
        return file

    def move_file(self, file_id: FileId, folder_id: FileId, root_folder_id: FileId) -> None:
        with session_scope(self._engine) as session:
            row = session.get(StoredFile, file_key(file_id))
            if row is None:
                raise FileNotFound(file_id)
            row.folder_id = file_key(folder_id)
            row.root_folder_id = file_key(root_folder_id)
            session.add(row)

    def share(self, file_id: FileId, subject_id, access: AccessLevel) -> None:
        with session_scope(self._engine) as session:
            session.merge(
                FileShare(
                    file_id=file_key(file_id),
                    subject_id=recipient_key(subject_id),
                    access=access.value,
                )
            )

    # --- FileService ---

    def get_file(self, file_id: FileId) -> FileRead:
        with session_scope(self._engine) as session:
            row = session.get(StoredFile, file_key(file_id))
            if row is None:
                raise FileNotFound(file_id)
            return _to_file(row)

    def get_files(self, file_ids: Iterable[FileId]) -> list[FileRead]:
        keys = [file_key(f) for f in file_ids]
        if not keys:
            return []
        with session_scope(self._engine) as session:
            rows = session.exec(select(StoredFile).where(StoredFile.id.in_(keys))).all()
            by_id = {row.id: _to_file(row) for row in rows}
        return [by_id[key] for key in keys if key in by_id]

    def get_root(self, project_id: int) -> FileId:
        with session_scope(self._engine) as session:
            row = session.get(ProjectRoot, project_id)
            if row is not None:
                return row.root_folder_id

        root = f"project-{project_id}"
        try:
            with session_scope(self._engine) as session:
                session.add(ProjectRoot(project_id=project_id, root_folder_id=root))
        except IntegrityError:
            # Another caller created it first; theirs wins.
            with session_scope(self._engine) as session:
                return session.get(ProjectRoot, project_id).root_folder_id
        log.info("files.root_created", project_id=project_id, root=root)
        return root

    def get_file_share(self, file: FileRead, project_id: int, actor_id) -> AccessLevel:
        with session_scope(self._engine) as session:
            row = session.get(FileShare, (file_key(file.id), recipient_key(actor_id)))
            return AccessLevel(row.access) if row else AccessLevel.READ

    def generate_image_thumb(self, file: FileRead) -> None:
        status = ThumbnailStatus.CREATED if file.is_image else ThumbnailStatus.NOT_REQUIRED
        with session_scope(self._engine) as session:
            row = session.get(StoredFile, file_key(file.id))
            if row is not None:
                row.thumbnail_status = status.value
                session.add(row)
        file.thumbnail_status = status

    def set_thumb_urls(self, files: Sequence[FileRead]) -> None:
        for file in files:
            if file.thumbnail_status == ThumbnailStatus.CREATED:
                file.thumbnail_url = (
                    f"{self._thumbnail_base_url}/{file.id}/thumb?version={file.version}"
                )


class SqlCommentStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def save_or_update(self, comment: Comment) -> Comment:
        with session_scope(self._engine) as session:
            row = session.get(CommentRecord, comment.id) if comment.id is not None else None
            if row is None:
                row = CommentRecord(
                    target_uniq_id=comment.target_uniq_id,
                    body=comment.body,
                    author_id=comment.author_id,
                    parent_id=comment.parent_id,
                    inactive=comment.inactive,
                )
                if comment.id is not None:
                    row.id = comment.id
            else:
                row.body = comment.body
                row.inactive = comment.inactive
            session.add(row)
            session.flush()
            session.refresh(row)
            comment.id = row.id
            comment.created_at = row.created_at
            comment.updated_at = row.updated_at
        return comment

    def get(self, comment_id) -> Optional[Comment]:
        with session_scope(self._engine) as session:
            row = session.get(CommentRecord, comment_id)
            return Comment.model_validate(row) if row else None

    def list_for_target(self, target_uniq_id: str) -> list[Comment]:
        with session_scope(self._engine) as session:
            rows = session.exec(
                select(CommentRecord)
                .where(
                    CommentRecord.target_uniq_id == target_uniq_id,
                    CommentRecord.inactive == False,  # noqa: E712
                )
                .order_by(CommentRecord.created_at)
            ).all()
            return [Comment.model_validate(row) for row in rows]
