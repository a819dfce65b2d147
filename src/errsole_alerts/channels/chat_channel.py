"""
Chat webhook alert channel for errsole-alerts.

Sends Block Kit formatted alerts to a Slack-compatible incoming webhook.
The webhook URL, display name and avatar are read from the config store on
every send, so a changed integration takes effect on the next alert.
"""

from __future__ import annotations

import structlog
from slack_sdk.webhook.async_client import AsyncWebhookClient

from ..errors import AlertError, ChannelDisabledError, SendTransportError
from ..formatting import build_chat_blocks
from ..models import AlertContext, ChatConfig
from ..store import load_channel_config
from .base import AlertChannel, race_timeout

logger = structlog.get_logger()


class ChatChannel(AlertChannel):
    """Post alerts to the configured chat webhook.

    Stateless: a webhook client is built per send from the current config.
    """

    name: str = "chat"

    async def load_config(self) -> ChatConfig:
        return await load_channel_config(self.store, self.settings.chat_config_key, ChatConfig)

    def build_payload(self, message: str, alert_type: str, context: AlertContext, config: ChatConfig) -> dict:
        """Render the webhook body, applying display-name and icon defaults."""
        payload = build_chat_blocks(message, alert_type, context, product=self.settings.product_name)
        payload["username"] = config.display_name or self.settings.chat_default_username
        payload["icon_url"] = config.icon_url or self.settings.chat_default_icon_url
        return payload

    async def _post(self, url: str, payload: dict) -> None:
        client = AsyncWebhookClient(url=url)
        response = await client.send_dict(payload)
        if response.status_code >= 400:
            raise SendTransportError(f"webhook returned HTTP {response.status_code}: {response.body}")

    async def _deliver(self, message: str, alert_type: str, context: AlertContext) -> None:
        config = await self.load_config()
        if config.is_disabled:
            raise ChannelDisabledError("chat integration is disabled")

        payload = self.build_payload(message, alert_type, context, config)
        try:
            await race_timeout(self._post(config.webhook_url, payload), self.timeout, what="chat send")
        except AlertError:
            raise
        except Exception as exc:
            raise SendTransportError(str(exc) or type(exc).__name__) from exc
