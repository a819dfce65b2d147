"""
errsole-alerts: alert dispatch for Errsole.

Delivers log-triggered alerts, uncaught-exception notifications and test
alerts to a chat webhook and to email, using per-channel settings read from
the host application's config store on every send.
"""

from errsole_alerts.api import (
    configure,
    dispatch_alert,
    dispatch_exception_alert,
    get_dispatcher,
    reset_email_transport,
    test_chat_alert,
    test_email_alert,
)
from errsole_alerts.dispatcher import AlertDispatcher
from errsole_alerts.models import AlertContext, AlertType
from errsole_alerts.store import ConfigStore, MemoryConfigStore

__all__ = [
    "AlertContext",
    "AlertDispatcher",
    "AlertType",
    "ConfigStore",
    "MemoryConfigStore",
    "configure",
    "dispatch_alert",
    "dispatch_exception_alert",
    "get_dispatcher",
    "reset_email_transport",
    "test_chat_alert",
    "test_email_alert",
]
