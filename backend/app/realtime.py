"""In-process change feed for inserted chat messages, scoped by conversation."""

import logging
import threading
import uuid
from collections.abc import Callable

from app.models import ChatMessagePublic

logger = logging.getLogger(__name__)

MessageCallback = Callable[[ChatMessagePublic], None]


class Subscription:
    def __init__(self, feed: "MessageFeed", conversation_id: uuid.UUID, callback: MessageCallback):
        self.feed = feed
        self.conversation_id = conversation_id
        self.callback = callback
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.feed._remove(self)
            self.closed = True


class MessageFeed:
    """
    Delivers each published message to the subscribers of its conversation.
    Delivery is at-least-once from the subscriber's point of view; no dedup happens here.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[uuid.UUID, list[Subscription]] = {}

    def subscribe(self, conversation_id: uuid.UUID, callback: MessageCallback) -> Subscription:
        subscription = Subscription(self, conversation_id, callback)
        with self._lock:
            self._subscribers.setdefault(conversation_id, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(subscription.conversation_id, [])
            if subscription in subs:
                subs.remove(subscription)
            if not subs:
                self._subscribers.pop(subscription.conversation_id, None)

    def subscriber_count(self, conversation_id: uuid.UUID) -> int:
        with self._lock:
            return len(self._subscribers.get(conversation_id, []))

    def publish(self, message: ChatMessagePublic) -> None:
        with self._lock:
            subs = list(self._subscribers.get(message.conversation_id, []))
        for subscription in subs:
            try:
                subscription.callback(message)
            except Exception as e:
                logger.error(
                    "Message feed subscriber failed for conversation %s: %s",
                    message.conversation_id,
                    e,
                )
