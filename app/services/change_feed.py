"""
Change Feed
In-process push feed of work order changes for live list views
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Set

from app.config import settings


logger = logging.getLogger(__name__)


class ChangeEvent(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeFeed:
    """Fan-out of change events to every connected subscriber, in emission order"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        logger.debug("Change feed subscriber added (%d active)", self.subscriber_count)
        try:
            yield queue
        finally:
            self._subscribers.discard(queue)
            logger.debug("Change feed subscriber removed (%d active)", self.subscriber_count)

    def publish(self, event: ChangeEvent, record: Dict[str, Any]) -> int:
        """Queue the change for every subscriber; returns how many received it"""
        change = {
            "event": event.value,
            "table": "work_requests",
            "record": record,
            "timestamp": datetime.utcnow().isoformat(),
        }
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(change)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Change feed subscriber is full, dropping %s event", event.value)
        return delivered


def apply_change(records: List[Dict[str, Any]], change: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Reflect a change event in a locally held list of records.

    INSERT prepends, UPDATE replaces the record with the same id, DELETE
    removes it. Returns a new list.
    """
    record = change["record"]
    event = change["event"]
    if event == ChangeEvent.INSERT.value:
        return [record] + list(records)
    if event == ChangeEvent.UPDATE.value:
        return [record if r.get("id") == record.get("id") else r for r in records]
    if event == ChangeEvent.DELETE.value:
        return [r for r in records if r.get("id") != record.get("id")]
    raise ValueError(f"Unknown change event: {event}")


# Global instance
change_feed = ChangeFeed(queue_size=settings.CHANGE_FEED_QUEUE_SIZE)
