"""
Abstract base class for alert channels in errsole-alerts.

Defines the AlertChannel interface that both channel implementations follow,
ensuring consistent delivery semantics and error handling: every failure
inside a channel is logged, counted, and reported as ``False``.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

import structlog

from ..config import Settings, get_settings
from ..errors import AlertError, ChannelDisabledError, SendTimeoutError
from ..metrics import record_failed, record_sent
from ..models import AlertContext, AlertType, alert_type_label
from ..store import ConfigStore

logger = structlog.get_logger()

T = TypeVar("T")

# Sends that lost the race against the timer.  Held here so they are not
# garbage-collected before they settle.
_detached: set[asyncio.Task[Any]] = set()


def _forget_detached(task: asyncio.Task[Any]) -> None:
    _detached.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("detached_send_failed", error=str(exc))
    else:
        logger.debug("detached_send_settled")


async def race_timeout(operation: Awaitable[T], timeout: float, *, what: str = "send") -> T:
    """Await *operation* for at most *timeout* seconds.

    If the timer wins, the operation is left running unobserved (not
    cancelled) and :class:`SendTimeoutError` is raised.  Its eventual result
    or exception is discarded.

    Raises:
        SendTimeoutError: *operation* did not settle in time.
        Exception: Whatever *operation* raised, if it settled first.
    """
    task = asyncio.ensure_future(operation)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    _detached.add(task)
    task.add_done_callback(_forget_detached)
    raise SendTimeoutError(f"{what} timed out after {timeout:g}s")


def pending_detached() -> int:
    """Number of timed-out sends that have not settled yet."""
    return len(_detached)


class AlertChannel(ABC):
    """Base class every alert delivery channel must implement.

    Subclasses override :meth:`_deliver`, which raises an
    :class:`~errsole_alerts.errors.AlertError` on failure.  :meth:`send`
    is the public boundary that turns the outcome into a boolean.

    Args:
        store: Config store the channel reads its settings from on every send.
        settings: Process settings; defaults to :func:`get_settings`.

    Attributes:
        name: Channel name used in logs and metrics.
    """

    name: str = "base"

    def __init__(self, store: ConfigStore, *, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    @property
    def timeout(self) -> float:
        return self.settings.send_timeout_s

    async def send(
        self,
        message: str,
        alert_type: AlertType | str,
        context: AlertContext | Mapping[str, Any] | None = None,
    ) -> bool:
        """Deliver *message* through this channel.

        Returns:
            ``True`` if delivery completed before the timeout, ``False`` for
            any failure (missing/malformed/disabled config, timeout,
            transport error, or anything unexpected).
        """
        label = alert_type_label(alert_type)
        log = logger.bind(channel=self.name, alert_type=label)
        try:
            ctx = AlertContext.coerce(context)
            await self._deliver(message, label, ctx)
        except ChannelDisabledError:
            log.info("channel_disabled")
            record_failed(self.name, ChannelDisabledError.reason)
            return False
        except AlertError as exc:
            log.warning("channel_send_failed", reason=exc.reason, error=str(exc))
            record_failed(self.name, exc.reason)
            return False
        except Exception as exc:  # noqa: BLE001
            log.error("channel_unexpected_error", error=str(exc), exc_info=True)
            record_failed(self.name, "unexpected")
            return False

        log.info("channel_delivered")
        record_sent(self.name, label)
        return True

    @abstractmethod
    async def _deliver(self, message: str, alert_type: str, context: AlertContext) -> None:
        """Send one alert or raise an ``AlertError`` describing why not."""

    async def close(self) -> None:
        """Release any resources held by the channel (override if needed)."""
