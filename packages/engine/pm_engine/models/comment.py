"""Comment model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin


class CommentRecord(TimestampMixin, SQLModel, table=True):
    __tablename__ = "comments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    target_uniq_id: str = Field(nullable=False, index=True)
    body: str = Field(nullable=False)
    author_id: str = Field(nullable=False, index=True)
    parent_id: Optional[uuid.UUID] = Field(default=None, foreign_key="comments.id")
    inactive: bool = Field(nullable=False, default=False)
