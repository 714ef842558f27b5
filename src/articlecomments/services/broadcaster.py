"""In-memory publish/subscribe channel for newly created comments and replies."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, AsyncIterator, Dict

from articlecomments.models import Comment, NewCommentEvent, NewReplyEvent, Reply

__all__ = ["EventBroadcaster", "Subscription"]

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100

_subscription_ids = itertools.count(1)


class Subscription:
    """Handle for one live subscriber.

    Events are buffered in a bounded queue owned by the subscriber; the
    publisher never waits on it.  A closed subscription receives nothing more.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = next(_subscription_ids)
        self._queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue(maxsize=queue_size)
        self.closed = False

    def __repr__(self) -> str:
        return f"Subscription(id={self.id}, closed={self.closed})"

    def offer(self, event: Dict[str, Any]) -> bool:
        """Queue ``event`` without blocking. Returns ``False`` when it was dropped."""

        if self.closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    async def receive(self) -> Dict[str, Any]:
        """Wait for and return the next event."""

        return await self._queue.get()

    def get_nowait(self) -> Dict[str, Any]:
        """Return the next buffered event or raise :class:`asyncio.QueueEmpty`."""

        return self._queue.get_nowait()

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self.closed = True

    async def __aiter__(self) -> AsyncIterator[Dict[str, Any]]:
        while not self.closed:
            yield await self.receive()


class EventBroadcaster:
    """Registry of live subscribers that fans out creation events.

    Delivery is best effort: there is no backlog for late subscribers, no
    acknowledgement and no retry.  Publishing never raises.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscriptions: Dict[int, Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        """Register a new subscriber and return its handle."""

        subscription = Subscription(self._queue_size)
        self._subscriptions[subscription.id] = subscription
        logger.debug("Subscriber %s registered (total: %d)", subscription.id, self.subscriber_count)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove ``subscription``. Calling this again for the same handle does nothing."""

        subscription.close()
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.debug("Subscriber %s removed (total: %d)", subscription.id, self.subscriber_count)

    def publish_new_comment(self, article_id: str, comment: Comment) -> int:
        """Notify subscribers of a new top-level comment. Returns the number reached."""

        event = NewCommentEvent(article_id=article_id, comment=comment)
        return self._publish(event.model_dump(mode="json", by_alias=True))

    def publish_new_reply(self, article_id: str, comment_id: str, reply: Reply) -> int:
        """Notify subscribers of a new reply. Returns the number reached."""

        event = NewReplyEvent(article_id=article_id, comment_id=comment_id, reply=reply)
        return self._publish(event.model_dump(mode="json", by_alias=True))

    def _publish(self, event: Dict[str, Any]) -> int:
        delivered = 0
        for subscription in list(self._subscriptions.values()):
            if subscription.offer(event):
                delivered += 1
            elif subscription.closed:
                self._subscriptions.pop(subscription.id, None)
            else:
                logger.warning("Dropping %s event for slow subscriber %s", event["kind"], subscription.id)
        return delivered
