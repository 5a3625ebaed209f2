"""Stored files, project storage roots and per-user file shares."""

from sqlmodel import Field, SQLModel

from .base import TimestampMixin


class StoredFile(TimestampMixin, SQLModel, table=True):
    __tablename__ = "files"

    id: str = Field(primary_key=True)
    title: str = Field(nullable=False)
    folder_id: str = Field(nullable=False, index=True)
    root_folder_id: str = Field(nullable=False, index=True)
    content_type: str = Field(nullable=False, default="application/octet-stream")
    version: int = Field(nullable=False, default=1)
    thumbnail_status: str = Field(nullable=False, default="waiting")  # waiting | created | not_required


class ProjectRoot(SQLModel, table=True):
    __tablename__ = "project_roots"

    project_id: int = Field(primary_key=True)
    root_folder_id: str = Field(nullable=False, unique=True)


class FileShare(SQLModel, table=True):
    __tablename__ = "file_shares"

    file_id: str = Field(foreign_key="files.id", primary_key=True)
    subject_id: str = Field(primary_key=True)
    access: str = Field(nullable=False)  # none | read | review | comment | read_write
