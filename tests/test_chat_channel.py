"""
Tests for the chat webhook alert channel.

Validates config-driven enable/disable, payload defaults, webhook
delivery, and the timeout race.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from errsole_alerts.channels.chat_channel import ChatChannel
from errsole_alerts.config import DEFAULT_ICON_URL
from errsole_alerts.store import MemoryConfigStore

from conftest import CHAT_KEY

_CLIENT_PATH = "errsole_alerts.channels.chat_channel.AsyncWebhookClient"


def _mock_client_cls(response=None, side_effect=None) -> MagicMock:
    client = MagicMock(name="AsyncWebhookClient()")
    client.send_dict = AsyncMock(return_value=response, side_effect=side_effect)
    return MagicMock(name="AsyncWebhookClient", return_value=client)


# ── send ──


class TestChatSend:
    """Tests for webhook delivery."""

    async def test_send_returns_true_on_success(self, store, settings, webhook_response) -> None:
        client_cls = _mock_client_cls(webhook_response)
        with patch(_CLIENT_PATH, client_cls):
            result = await ChatChannel(store, settings=settings).send("boom", "Alert")

        assert result is True
        client_cls.assert_called_once_with(url="https://hooks.slack.com/services/T00/B00/xxx")
        client_cls.return_value.send_dict.assert_awaited_once()

    async def test_send_applies_default_username_and_icon(self, store, settings, webhook_response) -> None:
        client_cls = _mock_client_cls(webhook_response)
        with patch(_CLIENT_PATH, client_cls):
            await ChatChannel(store, settings=settings).send("boom", "Alert")

        payload = client_cls.return_value.send_dict.call_args.args[0]
        assert payload["username"] == "Errsole"
        assert payload["icon_url"] == DEFAULT_ICON_URL
        assert payload["blocks"][0]["text"]["text"] == " :warning: *Errsole: Alert*"

    async def test_send_uses_configured_username_and_icon(self, settings, webhook_response) -> None:
        store = MemoryConfigStore(
            {CHAT_KEY: {"url": "https://x", "username": "Ops Bot", "icon_url": "https://icon"}}
        )
        client_cls = _mock_client_cls(webhook_response)
        with patch(_CLIENT_PATH, client_cls):
            await ChatChannel(store, settings=settings).send("boom", "Alert")

        payload = client_cls.return_value.send_dict.call_args.args[0]
        assert payload["username"] == "Ops Bot"
        assert payload["icon_url"] == "https://icon"

    async def test_send_includes_context_blocks(self, store, settings, webhook_response) -> None:
        client_cls = _mock_client_cls(webhook_response)
        with patch(_CLIENT_PATH, client_cls):
            await ChatChannel(store, settings=settings).send("boom", "Alert", {"appName": "App"})

        blocks = client_cls.return_value.send_dict.call_args.args[0]["blocks"]
        assert len(blocks) == 3

    async def test_send_returns_false_on_error_status(self, store, settings) -> None:
        resp = MagicMock(status_code=403, body="invalid_token")
        with patch(_CLIENT_PATH, _mock_client_cls(resp)):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False

    async def test_send_returns_false_on_network_error(self, store, settings) -> None:
        with patch(_CLIENT_PATH, _mock_client_cls(side_effect=ConnectionError("refused"))):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False

    async def test_send_returns_false_when_client_cannot_be_built(self, store, settings) -> None:
        with patch(_CLIENT_PATH, MagicMock(side_effect=ValueError("bad url"))):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False


# ── config ──


class TestChatConfig:
    """Tests for config-driven behaviour."""

    async def test_disabled_makes_no_network_call(self, settings) -> None:
        store = MemoryConfigStore({CHAT_KEY: {"status": False, "url": "https://x"}})
        client_cls = _mock_client_cls()
        with patch(_CLIENT_PATH, client_cls):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False
        client_cls.assert_not_called()

    async def test_missing_status_means_enabled(self, settings, webhook_response) -> None:
        store = MemoryConfigStore({CHAT_KEY: {"url": "https://x"}})
        with patch(_CLIENT_PATH, _mock_client_cls(webhook_response)):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is True

    @pytest.mark.parametrize("status", [0, "false", "no", "active", None, True])
    async def test_only_literal_false_disables(self, settings, webhook_response, status) -> None:
        store = MemoryConfigStore({CHAT_KEY: {"status": status, "url": "https://x"}})
        with patch(_CLIENT_PATH, _mock_client_cls(webhook_response)):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is True

    @pytest.mark.parametrize("get_config_result", [None, {"item": None}])
    async def test_missing_config_returns_false(self, settings, get_config_result) -> None:
        store = MagicMock()
        store.get_config = AsyncMock(return_value=get_config_result)
        client_cls = _mock_client_cls()
        with patch(_CLIENT_PATH, client_cls):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False
        client_cls.assert_not_called()

    async def test_malformed_config_returns_false(self, settings) -> None:
        store = MemoryConfigStore({CHAT_KEY: "{oops"})
        assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False

    async def test_store_error_returns_false(self, settings) -> None:
        store = MagicMock()
        store.get_config = AsyncMock(side_effect=RuntimeError("db down"))
        assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False

    async def test_config_change_applies_on_next_send(self, settings, webhook_response) -> None:
        store = MemoryConfigStore({CHAT_KEY: {"url": "https://a"}})
        client_cls = _mock_client_cls(webhook_response)
        channel = ChatChannel(store, settings=settings)
        with patch(_CLIENT_PATH, client_cls):
            await channel.send("one", "Alert")
            store.set_config(CHAT_KEY, {"url": "https://b"})
            await channel.send("two", "Alert")

        urls = [c.kwargs["url"] for c in client_cls.call_args_list]
        assert urls == ["https://a", "https://b"]


# ── timeout ──


class TestChatTimeout:
    """Tests for the send timeout, shortened through settings."""

    async def test_slow_webhook_returns_false(self, store, settings, webhook_response) -> None:
        async def slow(_payload):
            await asyncio.sleep(0.4)
            return webhook_response

        client = MagicMock()
        client.send_dict = slow
        with patch(_CLIENT_PATH, MagicMock(return_value=client)):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is False
        await asyncio.sleep(0.3)

    async def test_webhook_under_timeout_returns_true(self, store, settings, webhook_response) -> None:
        async def quick(_payload):
            await asyncio.sleep(0.05)
            return webhook_response

        client = MagicMock()
        client.send_dict = quick
        with patch(_CLIENT_PATH, MagicMock(return_value=client)):
            assert await ChatChannel(store, settings=settings).send("boom", "Alert") is True


class TestChatMeta:
    def test_channel_name(self, store) -> None:
        assert ChatChannel(store).name == "chat"

    async def test_close_does_not_raise(self, store) -> None:
        await ChatChannel(store).close()
