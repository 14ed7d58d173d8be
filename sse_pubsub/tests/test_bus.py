"""Tests for the in-memory topic bus and publisher."""
from __future__ import annotations

import logging

import pytest

from ..core.bus import Delivery, PubSub, Subscriber
from ..core.chunk import Chunk, ChunkKind
from ..core.errors import BusClosed, InvalidChunkKind
from ..core.publisher import broadcast, broadcast_payload


@pytest.mark.asyncio
async def test_publish_reaches_only_topic_subscribers() -> None:
    bus = PubSub()
    news, sports = Subscriber(), Subscriber()
    await bus.subscribe("news", news)
    await bus.subscribe("sports", sports)

    delivered = await bus.publish("news", Chunk(data="headline"))

    assert delivered == 1
    assert await news.get() == Delivery("news", Chunk(data="headline"))
    assert bus.subscriber_count("sports") == 1
    assert await bus.publish("sports", Chunk(data="score")) == 1
    assert (await sports.get()).message.data == "score"


@pytest.mark.asyncio
async def test_one_mailbox_fans_in_several_topics_in_order() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("a", subscriber)
    await bus.subscribe("b", subscriber)

    await bus.publish("a", Chunk(data="1"))
    await bus.publish("b", Chunk(data="2"))
    await bus.publish("a", Chunk(data="3"))

    received = [await subscriber.get() for _ in range(3)]
    assert [(d.topic, d.message.data) for d in received] == [("a", "1"), ("b", "2"), ("a", "3")]


@pytest.mark.asyncio
async def test_unsubscribe_removes_empty_topics() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("a", subscriber)
    assert bus.topics() == ["a"]

    await bus.unsubscribe("a", subscriber)
    await bus.unsubscribe("a", subscriber)

    assert bus.topics() == []
    assert await bus.publish("a", Chunk(data="lost")) == 0


@pytest.mark.asyncio
async def test_full_mailbox_drops_delivery(caplog: pytest.LogCaptureFixture) -> None:
    bus = PubSub()
    slow, fast = Subscriber(max_queue_size=1), Subscriber(max_queue_size=10)
    await bus.subscribe("t", slow)
    await bus.subscribe("t", fast)

    with caplog.at_level(logging.WARNING):
        assert await bus.publish("t", Chunk(data="1")) == 2
        assert await bus.publish("t", Chunk(data="2")) == 1

    assert "dropping" in caplog.text
    assert (await slow.get()).message.data == "1"
    assert [(await fast.get()).message.data for _ in range(2)] == ["1", "2"]


@pytest.mark.asyncio
async def test_close_wakes_subscribers_and_rejects_work() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("t", subscriber)

    await bus.close()

    assert subscriber.closed
    assert bus.closed
    with pytest.raises(BusClosed):
        await bus.publish("t", Chunk(data="late"))
    with pytest.raises(BusClosed):
        await bus.subscribe("t", Subscriber())


@pytest.mark.asyncio
async def test_broadcast_dispatches_chunk_once() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("time", subscriber)

    chunk = Chunk(data="01:34:55.123567", event="time")
    await broadcast(bus, "time", chunk)

    assert (await subscriber.get()).message is chunk


@pytest.mark.asyncio
async def test_broadcast_payload_keeps_caller_event_name() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("clock", subscriber)

    chunk = await broadcast_payload(bus, "clock", "12:00", ChunkKind.EVENT, "tick")

    assert chunk.event == "tick"
    assert (await subscriber.get()).message == Chunk(data="12:00", event="tick")


@pytest.mark.asyncio
async def test_broadcast_payload_rejects_unknown_kind_without_publishing() -> None:
    bus = PubSub()
    subscriber = Subscriber()
    await bus.subscribe("t", subscriber)

    with pytest.raises(InvalidChunkKind):
        await broadcast_payload(bus, "t", "x", "shout")

    assert await bus.publish("t", Chunk(data="marker")) == 1
    assert (await subscriber.get()).message.data == "marker"


@pytest.mark.asyncio
async def test_broadcast_surfaces_bus_errors() -> None:
    bus = PubSub()
    await bus.close()
    with pytest.raises(BusClosed):
        await broadcast(bus, "t", Chunk(data="x"))
