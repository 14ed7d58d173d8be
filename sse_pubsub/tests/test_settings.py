"""Tests for environment-driven settings."""
from __future__ import annotations

import logging

import pytest

from ..util.logging_config import setup_logging
from ..util.settings import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SSE_PUBSUB_MAILBOX_SIZE",
        "SSE_PUBSUB_PING_INTERVAL",
        "SSE_PUBSUB_DRAIN_TIMEOUT",
        "SSE_PUBSUB_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    assert Settings.from_env() == Settings()


def test_values_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SSE_PUBSUB_MAILBOX_SIZE", "8")
    monkeypatch.setenv("SSE_PUBSUB_PING_INTERVAL", "2.5")
    monkeypatch.setenv("SSE_PUBSUB_DRAIN_TIMEOUT", "1")
    monkeypatch.setenv("SSE_PUBSUB_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings == Settings(mailbox_size=8, ping_interval=2.5, drain_timeout=1.0, log_level="DEBUG")


@pytest.mark.parametrize("raw", ["lots", "0", "-3"])
def test_invalid_numbers_fall_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("SSE_PUBSUB_MAILBOX_SIZE", raw)
    monkeypatch.setenv("SSE_PUBSUB_PING_INTERVAL", raw)
    settings = Settings.from_env()
    assert settings.mailbox_size == 100
    assert settings.ping_interval == 15.0


def test_setup_logging_sets_root_level() -> None:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
