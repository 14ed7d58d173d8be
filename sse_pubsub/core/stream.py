"""Per-connection subscription loop relaying bus chunks as SSE frames."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable

from .bus import Bus, Delivery, Subscriber
from .chunk import Chunk
from .encoder import encode
from .errors import InvalidChunk
from .transport import Connection

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    IDLE = "idle"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"


class CloseCause(str, Enum):
    """Why a loop stopped streaming."""

    CLIENT_DISCONNECTED = "client_disconnected"
    SHUTDOWN_REQUESTED = "shutdown_requested"
    TRANSPORT_WRITE_FAILED = "transport_write_failed"
    INVALID_CHUNK = "invalid_chunk"


@dataclass(frozen=True, slots=True)
class StreamClosed:
    """Outcome reported when a loop returns."""

    cause: CloseCause
    error: BaseException | None = None
    frames_written: int = 0

    @property
    def clean(self) -> bool:
        return self.cause in (CloseCause.CLIENT_DISCONNECTED, CloseCause.SHUTDOWN_REQUESTED)


class _Interrupted(Exception):
    def __init__(self, cause: CloseCause) -> None:
        self.cause = cause
        super().__init__(cause.value)


class _WriteFailed(Exception):
    pass


class SubscriptionLoop:
    """Own one connection from subscription until it ends.

    Every chunk published on any subscribed topic is encoded and written to
    ``connection`` in the order the bus delivers it. The loop stops when the
    connection closes, when ``shutdown`` is set, when the bus is torn down,
    when a write fails, or when a malformed chunk arrives. Topics are always
    unsubscribed before :meth:`run` returns.
    """

    def __init__(
        self,
        connection: Connection,
        bus: Bus,
        topics: Iterable[str],
        *,
        initial_chunk: Chunk | None = None,
        shutdown: asyncio.Event | None = None,
        mailbox_size: int = 100,
    ) -> None:
        self.connection = connection
        self.bus = bus
        # Fixed for the lifetime of the connection; duplicates collapse.
        self.topics: tuple[str, ...] = tuple(dict.fromkeys(topics))
        self.initial_chunk = initial_chunk
        self.subscriber = Subscriber(max_queue_size=mailbox_size)
        self.state = StreamState.IDLE
        self.history: list[StreamState] = [StreamState.IDLE]
        self.frames_written = 0
        self._shutdown = shutdown
        self._subscribed: list[str] = []
        self._watchers: dict[asyncio.Future[Any], CloseCause] = {}

    def _enter(self, state: StreamState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug("Stream %s -> %s", self.subscriber.identity, state.value)

    async def run(self) -> StreamClosed:
        if self.state is not StreamState.IDLE:
            raise RuntimeError("subscription loop can only run once")
        try:
            await self._subscribe()
            result = await self._stream()
        except asyncio.CancelledError:
            logger.info("Stream %s cancelled", self.subscriber.identity)
            raise
        finally:
            self._stop_watching()
            try:
                await self._drain()
            finally:
                self._enter(StreamState.CLOSED)
        logger.info(
            "Stream %s closed: %s after %d frame(s)",
            self.subscriber.identity,
            result.cause.value,
            result.frames_written,
        )
        return result

    async def _subscribe(self) -> None:
        self._enter(StreamState.SUBSCRIBING)
        for topic in self.topics:
            await self.bus.subscribe(topic, self.subscriber)
            self._subscribed.append(topic)
        logger.info("Stream %s subscribed to %s", self.subscriber.identity, list(self.topics))

    async def _stream(self) -> StreamClosed:
        self._enter(StreamState.STREAMING)
        self._watch(self.connection.wait_closed(), CloseCause.CLIENT_DISCONNECTED)
        self._watch(self.subscriber.wait_closed(), CloseCause.SHUTDOWN_REQUESTED)
        if self._shutdown is not None:
            self._watch(self._shutdown.wait(), CloseCause.SHUTDOWN_REQUESTED)

        try:
            if self.initial_chunk is not None:
                await self._send(self.initial_chunk)
            while True:
                item = await self._until_interrupted(self.subscriber.get())
                await self._send(self._decode(item))
        except _Interrupted as exc:
            return self._closed(exc.cause)
        except InvalidChunk as exc:
            logger.error("Stream %s received malformed chunk: %s", self.subscriber.identity, exc)
            return self._closed(CloseCause.INVALID_CHUNK, exc)
        except _WriteFailed as exc:
            error = exc.__cause__
            logger.warning("Stream %s write failed: %s", self.subscriber.identity, error)
            return self._closed(CloseCause.TRANSPORT_WRITE_FAILED, error)

    def _closed(self, cause: CloseCause, error: BaseException | None = None) -> StreamClosed:
        return StreamClosed(cause=cause, error=error, frames_written=self.frames_written)

    def _decode(self, item: Any) -> Chunk:
        message = item.message if isinstance(item, Delivery) else item
        if not isinstance(message, Chunk):
            raise InvalidChunk(f"expected Chunk from bus, got {type(message).__name__}")
        return message

    async def _send(self, chunk: Chunk) -> None:
        frame = encode(chunk)
        try:
            await self._until_interrupted(self.connection.write(frame))
        except _Interrupted:
            raise
        except Exception as exc:
            raise _WriteFailed() from exc
        self.frames_written += 1

    def _watch(self, awaitable: Awaitable[Any], cause: CloseCause) -> None:
        self._watchers[asyncio.ensure_future(awaitable)] = cause

    def _interrupt_cause(self) -> CloseCause:
        for watcher, cause in self._watchers.items():
            if watcher.done():
                return cause
        raise RuntimeError("no watcher has fired")

    async def _until_interrupted(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable`` unless closure or shutdown happens first."""
        task = asyncio.ensure_future(awaitable)
        try:
            await asyncio.wait({task, *self._watchers}, return_when=asyncio.FIRST_COMPLETED)
        except BaseException:
            task.cancel()
            raise
        if not task.done():
            task.cancel()
            raise _Interrupted(self._interrupt_cause())
        return task.result()

    def _stop_watching(self) -> None:
        for watcher in self._watchers:
            watcher.cancel()
        self._watchers.clear()

    async def _unsubscribe(self, topic: str) -> None:
        try:
            await self.bus.unsubscribe(topic, self.subscriber)
        except Exception as exc:
            logger.warning(
                "Stream %s failed to unsubscribe from %s: %s",
                self.subscriber.identity,
                topic,
                exc,
            )

    async def _drain(self) -> None:
        """Unsubscribe every topic, finishing even if cancelled meanwhile."""
        self._enter(StreamState.DRAINING)
        cancelled: asyncio.CancelledError | None = None
        while self._subscribed:
            pending = asyncio.ensure_future(self._unsubscribe(self._subscribed.pop()))
            while not pending.done():
                try:
                    await asyncio.shield(pending)
                except asyncio.CancelledError as exc:
                    cancelled = exc
        if cancelled is not None:
            raise cancelled


async def stream(
    connection: Connection,
    bus: Bus,
    topics: Iterable[str],
    initial_chunk: Chunk | None = None,
    *,
    shutdown: asyncio.Event | None = None,
    mailbox_size: int = 100,
) -> StreamClosed:
    """Relay ``topics`` from ``bus`` to ``connection`` until it ends."""
    loop = SubscriptionLoop(
        connection,
        bus,
        topics,
        initial_chunk=initial_chunk,
        shutdown=shutdown,
        mailbox_size=mailbox_size,
    )
    return await loop.run()
