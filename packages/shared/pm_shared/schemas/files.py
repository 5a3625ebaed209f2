from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .common import AccessLevel, FileEntryType, TagType, ThumbnailStatus

FileId = Union[int, str]


class FileRead(BaseModel):
    id: FileId
    title: str
    folder_id: FileId
    root_folder_id: FileId
    content_type: str = "application/octet-stream"
    version: int = 1
    access: AccessLevel = AccessLevel.NONE
    thumbnail_status: ThumbnailStatus = ThumbnailStatus.WAITING
    thumbnail_url: Optional[str] = None

    model_config = {"from_attributes": True}

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


class Tag(BaseModel):
    """A tag linking a named namespace to one file-store entry."""

    model_config = ConfigDict(frozen=True)

    name: str
    tag_type: TagType = TagType.SYSTEM
    entry_type: FileEntryType = FileEntryType.FILE
    entry_id: str


def file_key(file_id) -> str:
    """File ids are stored and compared as strings in tags."""
    return str(file_id)
