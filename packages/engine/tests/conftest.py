"""
Shared fixtures: an in-memory factory with a few users, a recording
dispatcher, and a task entity in project 7.
"""

import pytest

from pm_engine.config import Settings
from pm_engine.factory import EngineFactory
from pm_engine.stores.memory import StaticPermissionOracle
from pm_shared.schemas.common import EntityKind
from pm_shared.schemas.entities import ProjectEntity, ProjectRef
from pm_shared.schemas.files import FileRead

PROJECT = ProjectRef(id=7, title="Apollo")
PROJECT_ROOT = "root-7"


class RecordingDispatcher:
    def __init__(self):
        self.files = []
        self.comments = []

    def send_new_file(self, recipients, entity, file_title):
        self.files.append((list(recipients), entity, file_title))

    def send_new_comment(self, recipients, entity, comment, is_new):
        self.comments.append((list(recipients), entity, comment.model_copy(), is_new))


class FailingDispatcher:
    def send_new_file(self, recipients, entity, file_title):
        raise RuntimeError("mail relay unreachable")

    def send_new_comment(self, recipients, entity, comment, is_new):
        raise RuntimeError("mail relay unreachable")


def seed(factory: EngineFactory) -> EngineFactory:
    factory.directory.add_user("u1", "Ann")
    factory.directory.add_user("u2", "Bob")
    factory.directory.add_group("g1", "Apollo team")
    factory.files.set_root(PROJECT.id, PROJECT_ROOT)
    return factory


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def permissions():
    oracle = StaticPermissionOracle()
    oracle.grant(PROJECT.id, "u1")
    oracle.grant(PROJECT.id, "u2")
    return oracle


@pytest.fixture
def factory(dispatcher, permissions):
    return seed(EngineFactory(Settings(), dispatcher=dispatcher, permissions=permissions))


@pytest.fixture
def engine(factory):
    return factory.get_engine(EntityKind.TASK)


@pytest.fixture
def task():
    return ProjectEntity(kind=EntityKind.TASK, id=123, project=PROJECT, title="Fix login redirect")


@pytest.fixture
def make_file(factory):
    def _make(file_id, title=None, content_type="text/plain", root=PROJECT_ROOT):
        return factory.files.add_file(
            FileRead(
                id=file_id,
                title=title or f"{file_id}.txt",
                folder_id=root,
                root_folder_id=root,
                content_type=content_type,
            )
        )

    return _make
