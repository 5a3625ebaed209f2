"""
File attachments for project entities.

An attachment is a system tag named after the entity's notify id and
pointing at a file, not a foreign key. Files moved out of the project's
storage root by unrelated code paths therefore keep their tag until the
next read, which detaches them.
"""

from __future__ import annotations

from typing import Optional

import structlog

from pm_shared.schemas.common import FileEntryType, TagType
from pm_shared.schemas.entities import ProjectEntity
from pm_shared.schemas.files import FileId, FileRead, Tag, file_key

from .dispatch import NotificationFanOut
from .metrics import MetricsCollector
from .protocols import FileService, PermissionOracle, TagStore

log = structlog.get_logger()


def _file_tag(entity: ProjectEntity, file_id: FileId) -> Tag:
    return Tag(
        name=entity.notify_id,
        tag_type=TagType.SYSTEM,
        entry_type=FileEntryType.FILE,
        entry_id=file_key(file_id),
    )


class FileAttachmentLinker:
    def __init__(
        self,
        tags: TagStore,
        files: FileService,
        permissions: PermissionOracle,
        fan_out: NotificationFanOut,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._tags = tags
        self._files = files
        self._permissions = permissions
        self._fan_out = fan_out
        self._metrics = metrics

    def attach(
        self,
        action: str,
        entity: ProjectEntity,
        file_id: FileId,
        actor_id,
        notify: bool = True,
    ) -> Optional[FileRead]:
        """Link a file to the entity. Returns the file, or None without file access."""
        if not self._permissions.can_read_files(entity.project, actor_id):
            return None

        self._tags.save_tag(_file_tag(entity, file_id))
        file = self._files.get_file(file_id)
        self._files.generate_image_thumb(file)
        log.info("attachments.attached", topic=entity.notify_id, file_id=file_key(file_id))

        if notify:
            self._fan_out.new_file(action, entity, file.title)
        return file

    def detach(self, entity: ProjectEntity, file_id: FileId, actor_id) -> None:
        if not self._permissions.can_read_files(entity.project, actor_id):
            return

        self._tags.remove_tag(_file_tag(entity, file_id))
        log.info("attachments.detached", topic=entity.notify_id, file_id=file_key(file_id))

    def list_files(self, entity: Optional[ProjectEntity], actor_id) -> list[FileRead]:
        if entity is None:
            return []
        # No file access reads the same as no files.
        if not self._permissions.can_read_files(entity.project, actor_id):
            return []

        tags = self._tags.get_tags(entity.notify_id, TagType.SYSTEM, FileEntryType.FILE)
        ids = [t.entry_id for t in tags if t.entry_type == FileEntryType.FILE]
        files = self._files.get_files(ids) if ids else []

        root_id = file_key(self._files.get_root(entity.project.id))

        result = []
        for file in files:
            if file_key(file.root_folder_id) != root_id:
                # Moved out of the project folder since it was attached.
                self.detach(entity, file.id, actor_id)
                log.info(
                    "attachments.reconciled",
                    topic=entity.notify_id,
                    file_id=file_key(file.id),
                    root=file_key(file.root_folder_id),
                    project_root=root_id,
                )
                if self._metrics:
                    self._metrics.inc("attachments_reconciled_total")
                continue
            result.append(file)

        for file in result:
            file.access = self._files.get_file_share(file, entity.project.id, actor_id)
        self._files.set_thumb_urls(result)
        return result
