"""In-memory topic bus for SSE streaming."""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Protocol

from .errors import BusClosed

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Delivery:
    """Envelope placed in a subscriber's mailbox."""

    topic: str
    message: Any


class Subscriber:
    """Identity of one connection on the bus plus its mailbox.

    A single mailbox is shared by every topic the connection subscribes to,
    so deliveries from all topics arrive interleaved in bus order.
    """

    def __init__(self, identity: str | None = None, *, max_queue_size: int = 100) -> None:
        self.identity = identity or uuid.uuid4().hex
        self._queue: asyncio.Queue[Delivery] = asyncio.Queue(max_queue_size)
        self._closed = asyncio.Event()

    def __repr__(self) -> str:
        return f"Subscriber({self.identity!r})"

    def deliver(self, item: Delivery) -> bool:
        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            return False
        return True

    async def get(self) -> Delivery:
        return await self._queue.get()

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def wait_closed(self) -> None:
        await self._closed.wait()


class Bus(Protocol):
    """Operations the subscription loop and publisher need from a bus."""

    async def subscribe(self, topic: str, subscriber: Subscriber) -> None: ...

    async def unsubscribe(self, topic: str, subscriber: Subscriber) -> None: ...

    async def publish(self, topic: str, message: Any) -> int: ...


class PubSub:
    """Topic-keyed pub/sub fan-out implemented with asyncio queues."""

    def __init__(self) -> None:
        self._topics: dict[str, set[Subscriber]] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def subscribe(self, topic: str, subscriber: Subscriber) -> None:
        if self._closed:
            raise BusClosed("bus is closed")
        async with self._lock:
            self._topics.setdefault(topic, set()).add(subscriber)

    async def unsubscribe(self, topic: str, subscriber: Subscriber) -> None:
        async with self._lock:
            members = self._topics.get(topic)
            if members is None:
                return
            members.discard(subscriber)
            if not members:
                del self._topics[topic]

    async def publish(self, topic: str, message: Any) -> int:
        """Deliver ``message`` to every current subscriber of ``topic``.

        Returns the number of mailboxes that accepted it.
        """
        if self._closed:
            raise BusClosed("bus is closed")
        delivery = Delivery(topic, message)
        delivered = 0
        async with self._lock:
            for subscriber in list(self._topics.get(topic, ())):
                if subscriber.deliver(delivery):
                    delivered += 1
                else:
                    # Drop for slow subscribers to avoid back-pressure.
                    logger.warning("Mailbox full, dropping %s delivery for %r", topic, subscriber)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    def topics(self) -> list[str]:
        return sorted(self._topics)

    async def close(self) -> None:
        """Tear down the bus and wake every subscriber."""
        self._closed = True
        async with self._lock:
            for members in self._topics.values():
                for subscriber in members:
                    subscriber.close()
            self._topics.clear()
        logger.info("Bus closed")
