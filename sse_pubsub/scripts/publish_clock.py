"""Publish the current time to a topic through the broadcast API."""
from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime

import httpx


async def publish_ticks(
    client: httpx.AsyncClient,
    topic: str = "time",
    *,
    count: int | None = None,
    interval: float = 1.0,
) -> int:
    """POST a ``time`` event every ``interval`` seconds; forever if ``count`` is None."""
    sent = 0
    while count is None or sent < count:
        response = await client.post(
            f"/api/broadcast/{topic}",
            json={
                "data": datetime.now(UTC).strftime("%H:%M:%S.%f"),
                "type": "event",
                "event": "time",
            },
        )
        response.raise_for_status()
        sent += 1
        if count is None or sent < count:
            await asyncio.sleep(interval)
    return sent


async def _run() -> None:
    base_url = os.getenv("SSE_PUBSUB_URL", "http://127.0.0.1:4000")
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
        await publish_ticks(client)


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
