"""Publishing chunks onto bus topics."""
from __future__ import annotations

from .bus import Bus
from .chunk import Chunk, ChunkKind, Payload, build_chunk


async def broadcast(bus: Bus, topic: str, chunk: Chunk) -> None:
    """Send ``chunk`` to every current subscriber of ``topic``.

    Fire-and-forget: bus errors propagate to the caller and are not retried.
    """
    await bus.publish(topic, chunk)


async def broadcast_payload(
    bus: Bus,
    topic: str,
    payload: Payload,
    kind: ChunkKind | str = ChunkKind.MESSAGE,
    event_name: str | None = None,
) -> Chunk:
    """Build a chunk from raw arguments and broadcast it.

    Raises :class:`~sse_pubsub.core.errors.InvalidChunkKind` before touching
    the bus when ``kind`` is not recognised.
    """
    chunk = build_chunk(payload, kind, event_name)
    await broadcast(bus, topic, chunk)
    return chunk
