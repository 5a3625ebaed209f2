"""Subscription model: one row per (action, topic, recipient)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import _utcnow


class Subscription(SQLModel, table=True):
    __tablename__ = "subscriptions"

    action: str = Field(primary_key=True)
    topic: str = Field(primary_key=True)
    recipient_id: str = Field(primary_key=True)
    # Copied from the recipient at subscribe time, so any directory can back the store.
    recipient_name: str = Field(nullable=False, default="")
    recipient_kind: str = Field(nullable=False, default="direct")
    # False marks an explicit unsubscribe.
    subscribed: bool = Field(nullable=False, default=True)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
