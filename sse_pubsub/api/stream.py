"""Server-sent events endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from sse_starlette.sse import EventSourceResponse

from ..core.transport import QueueConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])


def parse_topics(raw: str | None) -> list[str]:
    """Split a comma-separated ``topics`` parameter, trimming names and dropping blanks."""
    if not raw:
        return []
    return [topic.strip() for topic in raw.split(",") if topic.strip()]


@router.get("/sse")
async def subscribe(
    request: Request,
    topics: str | None = Query(None, description="Comma-separated topic names"),
) -> EventSourceResponse:
    """Stream every chunk published on ``topics`` until the client leaves."""

    topic_list = parse_topics(topics)
    if not topic_list:
        logger.warning("SSE client subscribed without topics")
    state = request.app.state

    async def event_generator():
        connection = QueueConnection()
        task = state.streams.start(connection, state.bus, topic_list)
        task.add_done_callback(lambda _: connection.close())
        try:
            async for frame in connection.frames():
                yield frame
        finally:
            # Ends the loop with a client-disconnect cause if still running.
            connection.close()

    return EventSourceResponse(event_generator(), ping=state.settings.ping_interval)
