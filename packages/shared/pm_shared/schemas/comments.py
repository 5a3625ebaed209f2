from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class Comment(BaseModel):
    """A comment on a project entity. ``id`` stays unset until first save."""

    id: Optional[UUID] = None
    target_uniq_id: Optional[str] = None
    body: str
    author_id: str
    parent_id: Optional[UUID] = None
    inactive: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @property
    def is_new(self) -> bool:
        return self.id is None
