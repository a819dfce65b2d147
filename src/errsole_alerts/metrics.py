"""
Prometheus metrics for errsole-alerts.

Counters are incremented at the channel boundary so every send attempt is
accounted for exactly once, whether it succeeded or was absorbed as a failure.
"""

from __future__ import annotations

from prometheus_client import Counter

alerts_sent_total = Counter(
    "errsole_alerts_sent_total",
    "Total alerts delivered by a channel",
    ["channel", "alert_type"],
)
alerts_failed_total = Counter(
    "errsole_alerts_failed_total",
    "Total alert sends that did not deliver",
    ["channel", "reason"],
)


def record_sent(channel: str, alert_type: str) -> None:
    """Count a successful delivery on *channel*."""
    alerts_sent_total.labels(channel=channel, alert_type=alert_type).inc()


def record_failed(channel: str, reason: str) -> None:
    """Count a failed or skipped delivery on *channel*.

    Args:
        channel: Channel name (``"chat"`` or ``"email"``).
        reason: Short failure label, e.g. ``"disabled"`` or ``"timeout"``.
    """
    alerts_failed_total.labels(channel=channel, reason=reason).inc()
