"""Recipient directory entries: users and groups that can be notified."""

from typing import Optional

from sqlmodel import Field, SQLModel


class DirectoryEntry(SQLModel, table=True):
    __tablename__ = "recipients"

    id: str = Field(primary_key=True)
    name: Optional[str] = None
    kind: str = Field(nullable=False, default="direct")  # direct | group
    removed: bool = Field(nullable=False, default=False)
