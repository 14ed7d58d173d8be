"""Publish endpoint for pushing chunks onto a topic."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, status

from ..core.errors import BusClosed, InvalidChunk, InvalidChunkKind
from ..core.publisher import broadcast_payload
from ..models.broadcast import BroadcastRequest, BroadcastResponse

router = APIRouter(tags=["broadcast"])


@router.post("/broadcast/{topic}", response_model=BroadcastResponse)
async def broadcast_to_topic(
    request: Request,
    topic: str,
    payload: BroadcastRequest,
) -> BroadcastResponse:
    """Send a message or named event to every subscriber of ``topic``."""

    try:
        chunk = await broadcast_payload(
            request.app.state.bus,
            topic,
            payload.data,
            payload.type,
            payload.event,
        )
    except InvalidChunkKind as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown chunk type {exc.kind!r}",
        ) from exc
    except InvalidChunk as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason) from exc
    except BusClosed as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bus is shutting down",
        ) from exc
    return BroadcastResponse(topic=topic, type=chunk.kind.value, event=chunk.event)
