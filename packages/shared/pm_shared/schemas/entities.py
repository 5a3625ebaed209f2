from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .common import EntityKind

EntityId = Union[int, str]


class ProjectRef(BaseModel):
    """Weak reference to the project owning an entity."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: Optional[str] = None


class ProjectEntity(BaseModel):
    """A task, milestone or discussion that users can follow."""

    model_config = ConfigDict(frozen=True)

    kind: EntityKind
    id: EntityId
    project: ProjectRef
    title: Optional[str] = None

    @property
    def notify_id(self) -> str:
        return notify_id(self.kind, self.id)


def notify_id(kind: EntityKind, entity_id: EntityId) -> str:
    """Stable topic / tag key for an entity, e.g. ``Task123``."""
    return f"{EntityKind(kind).value}{entity_id}"
