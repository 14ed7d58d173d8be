"""Tracking of live subscription loops so they can be drained together."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from .bus import Bus
from .chunk import Chunk
from .stream import StreamClosed, stream
from .transport import Connection

logger = logging.getLogger(__name__)


class StreamGroup:
    """Run subscription loops as tasks sharing one shutdown signal."""

    def __init__(self, *, mailbox_size: int = 100) -> None:
        self.shutdown = asyncio.Event()
        self._mailbox_size = mailbox_size
        self._tasks: set[asyncio.Task[StreamClosed]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def start(
        self,
        connection: Connection,
        bus: Bus,
        topics: Iterable[str],
        initial_chunk: Chunk | None = None,
    ) -> asyncio.Task[StreamClosed]:
        task = asyncio.create_task(
            stream(
                connection,
                bus,
                topics,
                initial_chunk,
                shutdown=self.shutdown,
                mailbox_size=self._mailbox_size,
            )
        )
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task[StreamClosed]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Stream task failed: %s", exc)

    async def drain(self, timeout: float = 5.0) -> None:
        """Ask every loop to stop and wait up to ``timeout`` seconds.

        Loops still running afterwards are cancelled; they finish
        unsubscribing before the cancellation completes.
        """
        self.shutdown.set()
        if not self._tasks:
            return
        logger.info("Draining %d stream(s)", len(self._tasks))
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled %d stream(s) that did not drain in time", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
