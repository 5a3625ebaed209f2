"""File tag model linking a tag name to one file-store entry."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import _utcnow


class FileTag(SQLModel, table=True):
    __tablename__ = "tags"

    name: str = Field(primary_key=True)
    tag_type: str = Field(primary_key=True)  # system | user
    entry_type: str = Field(primary_key=True)  # file | folder
    entry_id: str = Field(primary_key=True)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
