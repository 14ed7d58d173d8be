"""Chunk value type: one SSE payload before wire encoding."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from .errors import InvalidChunk, InvalidChunkKind

Payload = Union[str, Sequence[str]]


class ChunkKind(str, Enum):
    """Kinds accepted by :func:`build_chunk`."""

    MESSAGE = "message"
    EVENT = "event"


@dataclass(frozen=True, slots=True)
class Chunk:
    """Immutable SSE payload.

    ``data`` is either a single line or a tuple of lines. ``event`` is the
    event name; ``None`` leaves the event untyped so browsers dispatch it as
    ``message``.
    """

    data: str | tuple[str, ...]
    event: str | None = None

    @property
    def kind(self) -> ChunkKind:
        return ChunkKind.MESSAGE if self.event is None else ChunkKind.EVENT


def build_chunk(
    payload: Payload,
    kind: ChunkKind | str = ChunkKind.MESSAGE,
    event_name: str | None = None,
) -> Chunk:
    """Validate ``kind`` and build the matching chunk.

    ``event_name`` is required for ``event`` chunks and ignored for
    ``message`` chunks. Raises :class:`InvalidChunkKind` for any other kind.
    """

    try:
        resolved = ChunkKind(kind)
    except ValueError:
        raise InvalidChunkKind(kind) from None

    data = payload if isinstance(payload, str) or payload is None else tuple(payload)
    if resolved is ChunkKind.MESSAGE:
        return Chunk(data=data)
    if not event_name:
        raise InvalidChunk("event chunks require a non-empty event name")
    return Chunk(data=data, event=event_name)
