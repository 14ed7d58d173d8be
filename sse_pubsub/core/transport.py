"""Connection handles the subscription loop writes to."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Protocol

from .errors import ConnectionClosedError


class Connection(Protocol):
    """Transport borrowed by a subscription loop.

    The loop only writes and watches for closure; it never closes the
    connection itself.
    """

    @property
    def closed(self) -> bool: ...

    async def write(self, data: bytes) -> None: ...

    async def wait_closed(self) -> None: ...


class QueueConnection:
    """Connection whose writes are consumed by an async iterator.

    Bridges a subscription loop to a response generator such as the one
    passed to ``EventSourceResponse``. The hand-off queue holds a single
    frame, so ``write`` blocks until the reader has taken the previous one
    and a slow client only stalls its own loop.
    """

    def __init__(self) -> None:
        self._frames: asyncio.Queue[bytes] = asyncio.Queue(1)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def write(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionClosedError("connection is closed")
        put = asyncio.ensure_future(self._frames.put(data))
        closing = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({put, closing}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closing.cancel()
            if not put.done():
                put.cancel()
        if not put.done() or put.cancelled():
            raise ConnectionClosedError("connection closed during write")

    async def frames(self) -> AsyncIterator[bytes]:
        """Yield written frames until the connection is closed.

        Frames already handed off before closure are still yielded.
        """
        while not self.closed:
            getter = asyncio.ensure_future(self._frames.get())
            closing = asyncio.ensure_future(self._closed.wait())
            try:
                await asyncio.wait({getter, closing}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                closing.cancel()
                if not getter.done():
                    getter.cancel()
            if getter.done() and not getter.cancelled():
                yield getter.result()
        while not self._frames.empty():
            yield self._frames.get_nowait()
