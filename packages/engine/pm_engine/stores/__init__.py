from .memory import (  # noqa: F401
    InMemoryCommentStore,
    InMemoryFileService,
    InMemoryRecipientDirectory,
    InMemorySubscriptionStore,
    InMemoryTagStore,
    StaticPermissionOracle,
)
from .sql import (  # noqa: F401
    SqlCommentStore,
    SqlFileService,
    SqlRecipientDirectory,
    SqlSubscriptionStore,
    SqlTagStore,
)
