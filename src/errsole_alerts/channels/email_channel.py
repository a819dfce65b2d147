"""
Email alert channel for errsole-alerts.

Sends plain-text alert emails through a pooled SMTP transport.  The
transport is created lazily from the stored integration settings on the
first send and reused afterwards; :meth:`EmailChannel.reset_transport`
drops it so the next send rebuilds it from fresh settings.
"""

from __future__ import annotations

import asyncio
from email.message import EmailMessage

import structlog

from ..config import Settings
from ..errors import (
    AlertError,
    ChannelDisabledError,
    ConfigMalformedError,
    SendTransportError,
    TransportInitError,
)
from ..formatting import build_email
from ..models import AlertContext, EmailConfig
from ..store import ConfigStore, load_channel_config
from ..transport import SMTPTransport
from .base import AlertChannel, race_timeout

logger = structlog.get_logger()


class EmailChannel(AlertChannel):
    """Deliver alerts by email.

    The channel exclusively owns its :class:`SMTPTransport`.  Creation runs
    under an :class:`asyncio.Lock`, so concurrent first sends build a single
    transport.  Sender, recipients and the enabled flag are re-read from the
    store on every send, independently of the settings the transport was
    built from.
    """

    name: str = "email"

    def __init__(self, store: ConfigStore, *, settings: Settings | None = None) -> None:
        super().__init__(store, settings=settings)
        self._transport: SMTPTransport | None = None
        self._transport_lock = asyncio.Lock()

    @property
    def transport(self) -> SMTPTransport | None:
        return self._transport

    async def load_config(self) -> EmailConfig:
        return await load_channel_config(self.store, self.settings.email_config_key, EmailConfig)

    def create_transport(self, config: EmailConfig) -> SMTPTransport:
        """Build a pooled transport from *config* (no network I/O)."""
        return SMTPTransport(
            config.host,
            config.port,
            username=config.username,
            password=config.password,
            max_connections=self.settings.smtp_max_connections,
            max_messages=self.settings.smtp_max_messages,
            rate_limit=self.settings.smtp_rate_limit,
            connect_timeout=self.settings.smtp_connect_timeout_s,
        )

    async def ensure_transport(self) -> SMTPTransport:
        """Return the cached transport, creating it on first use.

        Raises:
            TransportInitError: Config could not be loaded or the transport
                could not be built.  The cache stays empty so the next call
                tries again.
        """
        if self._transport is not None:
            return self._transport

        async with self._transport_lock:
            if self._transport is not None:
                return self._transport
            try:
                config = await self.load_config()
                self._transport = self.create_transport(config)
            except Exception as exc:
                self._transport = None
                logger.error("email_transport_init_failed", error=str(exc))
                raise TransportInitError(f"failed to create email transport: {exc}") from exc

            logger.info(
                "email_transport_created",
                host=self._transport.host,
                port=self._transport.port,
                tls=self._transport.use_tls,
            )
            return self._transport

    def build_message(self, message: str, alert_type: str, context: AlertContext, config: EmailConfig) -> EmailMessage:
        recipients = config.recipient_list
        if not config.sender or not recipients:
            raise ConfigMalformedError("email integration has no sender or receivers")

        content = build_email(message, alert_type, context, product=self.settings.product_name)
        msg = EmailMessage()
        msg["Subject"] = content.subject
        msg["From"] = config.sender
        msg["To"] = ", ".join(recipients)
        msg.set_payload(content.body, charset="utf-8")
        return msg

    async def _deliver(self, message: str, alert_type: str, context: AlertContext) -> None:
        transport = await self.ensure_transport()

        config = await self.load_config()
        if config.is_disabled:
            raise ChannelDisabledError("email integration is disabled")

        email = self.build_message(message, alert_type, context, config)
        try:
            await race_timeout(transport.send_message(email), self.timeout, what="email send")
        except AlertError:
            raise
        except Exception as exc:
            raise SendTransportError(str(exc) or type(exc).__name__) from exc

    def reset_transport(self) -> bool:
        """Drop the cached transport so the next send rebuilds it.

        Always returns ``True``.  Sends already using the old transport
        finish on their own connection.
        """
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
            logger.info("email_transport_reset")
        return True

    async def close(self) -> None:
        """Close the cached transport."""
        self.reset_transport()
