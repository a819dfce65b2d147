"""
Structured logging setup for errsole-alerts.

Configures structlog for JSON-formatted structured logging.  Every log line
includes timestamp, level, service name, and event.  Per-send context
(channel, alert_type) is bound at dispatch time.
"""

from __future__ import annotations

import logging
import sys

import structlog

_configured = False


def configure_logging(
    level: str = "INFO",
    *,
    json: bool = True,
    service: str = "errsole-alerts",
) -> None:
    """Install the structlog processor chain.

    Safe to call more than once; only the first call takes effect.

    Args:
        level: Minimum level name (``"DEBUG"``, ``"INFO"``, …).
        json: Emit JSON lines when ``True``, coloured console output otherwise.
        service: Value of the ``service`` field stamped on every event.
    """
    global _configured
    if _configured:
        return

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    def _add_service(_: object, __: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", service)
        return event_dict

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    _configured = True


def is_configured() -> bool:
    """Return ``True`` once :func:`configure_logging` has run."""
    return _configured
