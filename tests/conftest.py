"""Shared fixtures for errsole-alerts tests."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from errsole_alerts import api
from errsole_alerts.config import Settings
from errsole_alerts.models import AlertContext
from errsole_alerts.store import MemoryConfigStore

CHAT_KEY = "chatIntegration"
EMAIL_KEY = "emailIntegration"


class SlowConfigStore(MemoryConfigStore):
    """Memory store whose reads yield to the event loop first."""

    def __init__(self, *args: Any, delay: float = 0.01, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.delay = delay
        self.reads = 0

    async def get_config(self, key: str) -> dict[str, Any]:
        self.reads += 1
        await asyncio.sleep(self.delay)
        return await super().get_config(key)


# ─── Fixtures ────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_default_dispatcher():
    """Keep the module-level dispatcher from leaking between tests."""
    api._dispatcher = None
    yield
    api._dispatcher = None


@pytest.fixture()
def settings() -> Settings:
    """Settings with a short send timeout so timeout paths run quickly."""
    return Settings(send_timeout_s=0.2, log_json=False)


@pytest.fixture()
def chat_config() -> dict[str, Any]:
    return {"status": True, "url": "https://hooks.slack.com/services/T00/B00/xxx"}


@pytest.fixture()
def email_config() -> dict[str, Any]:
    return {
        "status": True,
        "host": "smtp.example.com",
        "port": "587",
        "username": "user@example.com",
        "password": "password",
        "sender": "sender@example.com",
        "receivers": "receiver@example.com",
    }


@pytest.fixture()
def store(chat_config, email_config) -> MemoryConfigStore:
    return MemoryConfigStore({CHAT_KEY: chat_config, EMAIL_KEY: email_config})


@pytest.fixture()
def context() -> AlertContext:
    return AlertContext(appName="App", environmentName="Env", serverName="web-1")


@pytest.fixture()
def fake_transport() -> MagicMock:
    """Stand-in for ``SMTPTransport`` that records sent messages."""
    transport = MagicMock(name="SMTPTransport")
    transport.host = "smtp.example.com"
    transport.port = 587
    transport.use_tls = False
    transport.send_message = AsyncMock(return_value=None)
    return transport


@pytest.fixture()
def webhook_response() -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.body = "ok"
    return resp
