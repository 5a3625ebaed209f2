"""Resolves opaque recipient ids against the recipient directory."""

from __future__ import annotations

from typing import Optional

import structlog

from pm_shared.schemas.recipients import Recipient, recipient_key

from .protocols import RecipientDirectory

log = structlog.get_logger()


class RecipientResolver:
    def __init__(self, directory: RecipientDirectory) -> None:
        self._directory = directory

    def resolve(self, recipient_id) -> Optional[Recipient]:
        """Return the recipient, or None when the directory does not know the id."""
        if recipient_id is None:
            return None
        recipient = self._directory.get_recipient(recipient_key(recipient_id))
        if recipient is None:
            log.debug("recipients.not_found", recipient_id=recipient_key(recipient_id))
        return recipient
