"""
Module-level entry points for errsole-alerts.

The host wires its config store once with :func:`configure`; callers then use
the coroutine functions below.  Every function returns a boolean and never
raises.  Before :func:`configure` they log and return ``False``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from .config import Settings, get_settings
from .dispatcher import AlertDispatcher
from .logging import configure_logging, is_configured
from .models import AlertContext
from .store import ConfigStore

logger = structlog.get_logger()

_dispatcher: AlertDispatcher | None = None


def configure(store: ConfigStore, *, settings: Settings | None = None) -> AlertDispatcher:
    """Install the process-wide dispatcher backed by *store*.

    Calling it again replaces the dispatcher; the previous one's email
    transport is dropped.

    Returns:
        The new :class:`AlertDispatcher`.
    """
    global _dispatcher
    settings = settings or get_settings()
    if not is_configured():
        configure_logging(settings.log_level, json=settings.log_json)

    if _dispatcher is not None:
        _dispatcher.reset_email_transport()
    _dispatcher = AlertDispatcher(store, settings=settings)
    return _dispatcher


def get_dispatcher() -> AlertDispatcher | None:
    """Return the dispatcher installed by :func:`configure`, if any."""
    return _dispatcher


def _require(operation: str) -> AlertDispatcher | None:
    if _dispatcher is None:
        logger.warning("alerts_not_configured", operation=operation)
    return _dispatcher


async def dispatch_alert(message: str, context: AlertContext | Mapping[str, Any] | None = None) -> bool:
    """Send a log-triggered alert to every channel."""
    dispatcher = _require("dispatch_alert")
    if dispatcher is None:
        return False
    return await dispatcher.alert(message, context)


async def dispatch_exception_alert(message: str, context: AlertContext | Mapping[str, Any] | None = None) -> bool:
    """Send an uncaught-exception notification to every channel."""
    dispatcher = _require("dispatch_exception_alert")
    if dispatcher is None:
        return False
    return await dispatcher.uncaught_exception(message, context)


async def test_chat_alert(message: str, context: AlertContext | Mapping[str, Any] | None = None) -> bool:
    """Send a test alert through the chat channel only."""
    dispatcher = _require("test_chat_alert")
    if dispatcher is None:
        return False
    return await dispatcher.test_chat(message, context)


async def test_email_alert(message: str, context: AlertContext | Mapping[str, Any] | None = None) -> bool:
    """Send a test alert through the email channel only."""
    dispatcher = _require("test_email_alert")
    if dispatcher is None:
        return False
    return await dispatcher.test_email(message, context)


async def reset_email_transport() -> bool:
    """Drop the cached email transport; always ``True``."""
    if _dispatcher is not None:
        _dispatcher.reset_email_transport()
    return True
