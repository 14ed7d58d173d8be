"""Pydantic models for the broadcast API."""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class BroadcastRequest(BaseModel):
    data: Union[str, list[str]]
    type: str = Field(default="message")
    event: Optional[str] = None


class BroadcastResponse(BaseModel):
    topic: str
    type: str
    event: Optional[str] = None
