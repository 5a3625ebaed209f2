from enum import Enum


class EntityKind(str, Enum):
    TASK = "Task"
    SUBTASK = "Subtask"
    MILESTONE = "Milestone"
    DISCUSSION = "Discussion"


class RecipientKind(str, Enum):
    DIRECT = "direct"
    GROUP = "group"


class TagType(str, Enum):
    SYSTEM = "system"
    USER = "user"


class FileEntryType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


class AccessLevel(str, Enum):
    NONE = "none"
    READ = "read"
    REVIEW = "review"
    COMMENT = "comment"
    READ_WRITE = "read_write"


class ThumbnailStatus(str, Enum):
    WAITING = "waiting"
    CREATED = "created"
    NOT_REQUIRED = "not_required"
