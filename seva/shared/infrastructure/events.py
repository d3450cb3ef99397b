"""
Change Feed
===========

In-process publish/subscribe of collection changes.

Writers publish the collection name after a committed write; every live
subscriber of that collection is woken and re-reads the whole collection.
There is no payload diffing and no replay: a subscriber that connects late
simply starts from the current snapshot.
"""

import asyncio
from collections import defaultdict
from typing import Dict, Set

from seva.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class ChangeFeed:
    """Fan-out of change signals to per-subscriber queues."""

    def __init__(self, max_pending: int = 100):
        self._max_pending = max_pending
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, collection: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_pending)
        self._subscribers[collection].add(queue)
        logger.debug(
            "Live subscriber added",
            extra={"collection": collection, "subscribers": len(self._subscribers[collection])}
        )
        return queue

    def unsubscribe(self, collection: str, queue: asyncio.Queue) -> None:
        self._subscribers[collection].discard(queue)
        if not self._subscribers[collection]:
            del self._subscribers[collection]

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers.get(collection, ()))

    def publish(self, *collections: str) -> None:
        """
        Signal that each named collection changed.

        A subscriber whose queue is already full has a snapshot pending, so
        the extra signal is dropped for it.
        """
        for collection in collections:
            for queue in list(self._subscribers.get(collection, ())):
                if queue.full():
                    continue
                queue.put_nowait(collection)
            logger.debug(
                "Change published",
                extra={"collection": collection, "subscribers": self.subscriber_count(collection)}
            )
