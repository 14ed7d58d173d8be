"""Runtime settings read from the environment."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Settings:
    """Container for SSE bridge settings."""

    mailbox_size: int = 100
    ping_interval: float = 15.0
    drain_timeout: float = 5.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mailbox_size=_env_int("SSE_PUBSUB_MAILBOX_SIZE", default=100),
            ping_interval=_env_float("SSE_PUBSUB_PING_INTERVAL", default=15.0),
            drain_timeout=_env_float("SSE_PUBSUB_DRAIN_TIMEOUT", default=5.0),
            log_level=os.getenv("SSE_PUBSUB_LOG_LEVEL", "INFO").upper(),
        )


def _env_int(name: str, *, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value < 1:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def _env_float(name: str, *, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value
