"""
Exception hierarchy for errsole-alerts.

Channels raise these internally and convert them to ``False`` at their
``send`` boundary.  Each class carries a short ``reason`` label used for
log events and the ``errsole_alerts_failed_total`` metric.
"""

from __future__ import annotations

import asyncio


class AlertError(Exception):
    """Base class for every failure raised inside a channel."""

    reason: str = "error"


class ConfigMissingError(AlertError):
    """The config store has no item for the channel key."""

    reason = "config_missing"


class ConfigMalformedError(AlertError):
    """The stored value is not valid JSON or fails validation."""

    reason = "config_malformed"


class ChannelDisabledError(AlertError):
    """The channel's ``status`` flag is explicitly ``false``."""

    reason = "disabled"


class TransportInitError(AlertError):
    """The SMTP transport could not be constructed."""

    reason = "transport_init"


class SendTimeoutError(AlertError, asyncio.TimeoutError):
    """The send did not settle within the configured timeout."""

    reason = "timeout"


class SendTransportError(AlertError):
    """The network or mail operation itself failed."""

    reason = "transport"
