"""Streaming bridge between the topic bus and SSE connections."""
from .bus import Bus, Delivery, PubSub, Subscriber
from .chunk import Chunk, ChunkKind, build_chunk
from .encoder import encode
from .errors import (
    BusClosed,
    BusError,
    ConnectionClosedError,
    InvalidChunk,
    InvalidChunkKind,
    SSEPubSubError,
)
from .publisher import broadcast, broadcast_payload
from .stream import CloseCause, StreamClosed, StreamState, SubscriptionLoop, stream
from .streams import StreamGroup
from .transport import Connection, QueueConnection

__all__ = [
    "Bus",
    "BusClosed",
    "BusError",
    "Chunk",
    "ChunkKind",
    "CloseCause",
    "Connection",
    "ConnectionClosedError",
    "Delivery",
    "InvalidChunk",
    "InvalidChunkKind",
    "PubSub",
    "QueueConnection",
    "SSEPubSubError",
    "StreamClosed",
    "StreamGroup",
    "StreamState",
    "Subscriber",
    "SubscriptionLoop",
    "broadcast",
    "broadcast_payload",
    "build_chunk",
    "encode",
    "stream",
]
