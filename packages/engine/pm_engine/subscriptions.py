"""
Subscription registry: who follows which topic, per notify action.

An explicit unsubscribe is remembered per (action, topic, recipient) and
wins over later conditional subscribes, such as the implicit subscribe that
follows writing a comment. Unknown recipients make every operation a no-op.
"""

from __future__ import annotations

import structlog

from pm_shared.schemas.recipients import Recipient

from .protocols import SubscriptionStore
from .recipients import RecipientResolver

log = structlog.get_logger()


class SubscriptionRegistry:
    def __init__(self, store: SubscriptionStore, resolver: RecipientResolver) -> None:
        self._store = store
        self._resolver = resolver

    def subscribe(self, action: str, topic: str, recipient_id) -> None:
        recipient = self._resolver.resolve(recipient_id)
        if recipient is None:
            return

        if self._is_unsubscribed(action, topic, recipient):
            log.debug(
                "subscriptions.skipped_unsubscribed",
                action=action,
                topic=topic,
                recipient_id=recipient.id,
            )
            return

        self._store.subscribe(action, topic, recipient)
        log.info("subscriptions.added", action=action, topic=topic, recipient_id=recipient.id)

    def unsubscribe(self, action: str, topic: str, recipient_id) -> None:
        recipient = self._resolver.resolve(recipient_id)
        if recipient is None:
            return

        self._store.unsubscribe(action, topic, recipient)
        log.info("subscriptions.removed", action=action, topic=topic, recipient_id=recipient.id)

    def is_subscribed(self, action: str, topic: str, recipient_id) -> bool:
        recipient = self._resolver.resolve(recipient_id)
        if recipient is None:
            return False
        return self._has_subscription(action, topic, recipient)

    def is_unsubscribed(self, action: str, topic: str, recipient_id) -> bool:
        recipient = self._resolver.resolve(recipient_id)
        return recipient is not None and self._is_unsubscribed(action, topic, recipient)

    def follow(self, action: str, topic: str, recipient_id) -> bool:
        """Toggle the subscription. Returns True when the recipient now follows the topic."""
        recipient = self._resolver.resolve(recipient_id)
        if recipient is None:
            return False

        stored = self._matching_topics(action, topic, recipient)
        if stored:
            # Drop the subscription under the casing it was stored with.
            for stored_topic in stored:
                self._store.unsubscribe(action, stored_topic, recipient)
            log.info("subscriptions.unfollowed", action=action, topic=topic, recipient_id=recipient.id)
            return False

        self._store.subscribe(action, topic, recipient)
        log.info("subscriptions.followed", action=action, topic=topic, recipient_id=recipient.id)
        return True

    def get_subscribers(self, action: str, topic: str) -> list[Recipient]:
        return list(self._store.get_recipients(action, topic))

    def _matching_topics(self, action: str, topic: str, recipient: Recipient) -> list[str]:
        wanted = topic.casefold()
        return [t for t in self._store.get_subscriptions(action, recipient) if t.casefold() == wanted]

    def _has_subscription(self, action: str, topic: str, recipient: Recipient) -> bool:
        return bool(self._matching_topics(action, topic, recipient))

    def _is_unsubscribed(self, action: str, topic: str, recipient: Recipient) -> bool:
        # Groups have no personal opt-out.
        if not recipient.is_direct:
            return False
        return self._store.is_unsubscribed(action, topic, recipient)
