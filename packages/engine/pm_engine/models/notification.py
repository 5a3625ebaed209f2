"""Notification outbox, drained by whatever delivers mail/push."""

from datetime import datetime
from typing import List, Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import _utcnow


class NotificationEvent(SQLModel, table=True):
    __tablename__ = "notification_events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    topic: str = Field(nullable=False, index=True)
    type: str = Field(nullable=False)  # file.created | comment.created | comment.updated
    recipient_ids: List[str] = Field(default_factory=list, sa_type=sa.JSON)
    payload: dict = Field(default_factory=dict, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    delivered_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
