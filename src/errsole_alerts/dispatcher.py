"""
Alert dispatch facade for errsole-alerts.

Fans an alert out to the chat and email channels and folds the outcome into
a single boolean.

Flow
----
1. ``dispatch`` sends to chat, then to email, strictly one after the other.
2. Channels report ordinary failures as ``False``; those do not stop the
   other channel and do not change the overall result.
3. A channel that *raises* aborts the dispatch: it is logged and the whole
   call returns ``False``.  If chat raises, email is not attempted.
4. ``test_chat`` / ``test_email`` exercise one channel with a ``Test``
   alert and return that channel's own result.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from .channels.chat_channel import ChatChannel
from .channels.email_channel import EmailChannel
from .config import Settings
from .models import AlertContext, AlertType, alert_type_label
from .store import ConfigStore

logger = structlog.get_logger()

Context = AlertContext | Mapping[str, Any] | None


class AlertDispatcher:
    """Route alerts to the chat and email channels.

    Args:
        store: Config store handed to both channels.
        settings: Optional settings override shared by both channels.
        chat: Pre-built chat channel (built from *store* if omitted).
        email: Pre-built email channel (built from *store* if omitted).
    """

    def __init__(
        self,
        store: ConfigStore,
        *,
        settings: Settings | None = None,
        chat: ChatChannel | None = None,
        email: EmailChannel | None = None,
    ) -> None:
        self.store = store
        self.chat = chat or ChatChannel(store, settings=settings)
        self.email = email or EmailChannel(store, settings=settings)

    # ── fan-out ──

    async def dispatch(self, message: str, alert_type: AlertType | str, context: Context = None) -> bool:
        """Send *message* to chat, then email.

        Returns:
            ``True`` if both channels were attempted without raising,
            ``False`` if either raised.  Per-channel delivery results are
            logged, not folded into the return value.
        """
        label = alert_type_label(alert_type)
        log = logger.bind(alert_type=label)
        try:
            chat_ok = await self.chat.send(message, label, context)
            email_ok = await self.email.send(message, label, context)
        except Exception as exc:  # noqa: BLE001
            log.error("dispatch_failed", error=str(exc), exc_info=True)
            return False

        log.info("alert_dispatched", chat=chat_ok, email=email_ok)
        return True

    async def alert(self, message: str, context: Context = None) -> bool:
        """Dispatch a log-triggered alert."""
        return await self.dispatch(message, AlertType.ALERT, context)

    async def uncaught_exception(self, message: str, context: Context = None) -> bool:
        """Dispatch an uncaught-exception notification."""
        return await self.dispatch(message, AlertType.UNCAUGHT_EXCEPTION, context)

    # ── single-channel tests ──

    async def _test(self, channel: ChatChannel | EmailChannel, message: str, context: Context) -> bool:
        try:
            return await channel.send(message, AlertType.TEST, context)
        except Exception as exc:  # noqa: BLE001
            logger.error("test_alert_failed", channel=channel.name, error=str(exc), exc_info=True)
            return False

    async def test_chat(self, message: str, context: Context = None) -> bool:
        """Send a ``Test`` alert through the chat channel only."""
        return await self._test(self.chat, message, context)

    async def test_email(self, message: str, context: Context = None) -> bool:
        """Send a ``Test`` alert through the email channel only."""
        return await self._test(self.email, message, context)

    # ── lifecycle ──

    def reset_email_transport(self) -> bool:
        return self.email.reset_transport()

    async def close(self) -> None:
        """Release channel resources."""
        await self.chat.close()
        await self.email.close()
