"""Exception taxonomy for the SSE bridge."""
from __future__ import annotations

from typing import Any


class SSEPubSubError(Exception):
    """Base class for errors raised by this package."""


class InvalidChunkKind(SSEPubSubError, ValueError):
    """Raised by ``build_chunk`` for an unrecognised chunk kind."""

    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"Unknown chunk kind: {kind!r}")


class InvalidChunk(SSEPubSubError, ValueError):
    """Raised when a chunk cannot be encoded onto the wire."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class BusError(SSEPubSubError):
    """The pub/sub bus rejected an operation."""


class BusClosed(BusError):
    """The bus has been torn down and no longer accepts work."""


class ConnectionClosedError(SSEPubSubError):
    """Write attempted on a connection that is already closed."""
