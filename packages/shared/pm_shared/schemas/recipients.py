from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from .common import RecipientKind


class Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    kind: RecipientKind = RecipientKind.DIRECT

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value):
        if isinstance(value, UUID):
            return str(value)
        return value

    @property
    def is_direct(self) -> bool:
        return self.kind == RecipientKind.DIRECT


def recipient_key(recipient_id) -> str:
    """Recipient ids are compared in their string form."""
    return str(recipient_id)
