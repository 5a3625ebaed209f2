# SQLModel definitions, imported here so create_all sees every table.
from .base import TimestampMixin  # noqa: F401
from .recipient import DirectoryEntry  # noqa: F401
from .subscription import Subscription  # noqa: F401
from .tag import FileTag  # noqa: F401
from .file import StoredFile, ProjectRoot, FileShare  # noqa: F401
from .comment import CommentRecord  # noqa: F401
from .notification import NotificationEvent  # noqa: F401
