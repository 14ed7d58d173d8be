"""Tests for chunk construction."""
from __future__ import annotations

import pytest

from ..core.chunk import Chunk, ChunkKind, build_chunk
from ..core.errors import InvalidChunk, InvalidChunkKind


@pytest.mark.parametrize("payload", ["hello", "", ["a", "b"], []])
def test_message_chunk_is_untyped(payload) -> None:
    chunk = build_chunk(payload, "message", "ignored")
    assert chunk.event is None
    assert chunk.kind is ChunkKind.MESSAGE


def test_message_is_default_kind() -> None:
    assert build_chunk("tick") == Chunk(data="tick")


def test_sequence_payload_is_frozen() -> None:
    lines = ["a", "b"]
    chunk = build_chunk(lines, ChunkKind.MESSAGE)
    lines.append("c")
    assert chunk.data == ("a", "b")


@pytest.mark.parametrize("kind", ["event", ChunkKind.EVENT])
def test_event_chunk_uses_given_name(kind) -> None:
    chunk = build_chunk("01:34:55.123567", kind, "clock")
    assert chunk.event == "clock"
    assert chunk.kind is ChunkKind.EVENT
    assert chunk.data == "01:34:55.123567"


@pytest.mark.parametrize("kind", ["broadcast", "", None, 3, "EVENT"])
def test_unknown_kind_is_rejected(kind) -> None:
    with pytest.raises(InvalidChunkKind) as excinfo:
        build_chunk("payload", kind, "name")
    assert excinfo.value.kind == kind


@pytest.mark.parametrize("name", [None, ""])
def test_event_without_name_is_rejected(name) -> None:
    with pytest.raises(InvalidChunk):
        build_chunk("payload", "event", name)


def test_chunk_is_immutable() -> None:
    chunk = Chunk(data="x")
    with pytest.raises(AttributeError):
        chunk.data = "y"  # type: ignore[misc]
