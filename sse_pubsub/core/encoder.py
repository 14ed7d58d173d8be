"""Chunk to SSE wire-format translation."""
from __future__ import annotations

import re

from .chunk import Chunk
from .errors import InvalidChunk

# Line terminators recognised by the EventSource parser.
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _data_lines(data: str | tuple[str, ...]) -> list[str]:
    if data is None:
        raise InvalidChunk("chunk data must not be None")
    lines = [data] if isinstance(data, str) else data
    result: list[str] = []
    for line in lines:
        if not isinstance(line, str):
            raise InvalidChunk(f"data lines must be str, got {type(line).__name__}")
        # Embedded newlines would end the field early on the client.
        result.extend(_LINE_BREAK.split(line))
    return result


def encode(chunk: Chunk) -> bytes:
    """Return the exact SSE frame for ``chunk`` as UTF-8 bytes.

    ``Chunk(data=["a", "b"], event="tick")`` becomes
    ``b"event: tick\\ndata: a\\ndata: b\\n\\n"``.
    """

    if not isinstance(chunk, Chunk):
        raise InvalidChunk(f"expected Chunk, got {type(chunk).__name__}")

    parts: list[str] = []
    if chunk.event is not None:
        if not isinstance(chunk.event, str) or _LINE_BREAK.search(chunk.event):
            raise InvalidChunk(f"invalid event name: {chunk.event!r}")
        parts.append(f"event: {chunk.event}\n")
    parts.extend(f"data: {line}\n" for line in _data_lines(chunk.data))
    parts.append("\n")
    return "".join(parts).encode("utf-8")
