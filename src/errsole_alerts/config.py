"""
Environment-based configuration management for errsole-alerts.

Uses pydantic-settings to load tunables from environment variables and
``.env`` files.  These are process-level knobs (timeouts, SMTP pool sizing,
branding); per-channel credentials live in the host application's config
store and are fetched on every send.

All environment variables are prefixed with ``ERRSOLE_ALERTS_``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ICON_URL = "https://avatars.githubusercontent.com/u/84983840"


class Settings(BaseSettings):
    """Central configuration loaded from ``ERRSOLE_ALERTS_``-prefixed variables.

    Attributes:
        product_name: Product label used in chat headers and email subjects.
        send_timeout_s: Upper bound for a single channel send.
        chat_config_key: Config-store key holding the chat integration blob.
        email_config_key: Config-store key holding the email integration blob.
        chat_default_username: Webhook display name when none is configured.
        chat_default_icon_url: Webhook avatar when none is configured.
        smtp_max_connections: Maximum open SMTP connections per transport.
        smtp_max_messages: Messages sent over one connection before recycling.
        smtp_rate_limit: Maximum messages per second across the pool.
        smtp_connect_timeout_s: Timeout for establishing an SMTP connection.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Render logs as JSON (``False`` for human-readable console).
    """

    model_config = SettingsConfigDict(
        env_prefix="ERRSOLE_ALERTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Branding ──
    product_name: str = Field(default="Errsole", description="Product label in alert headers.")

    # ── Delivery ──
    send_timeout_s: float = Field(
        default=5.0,
        gt=0.0,
        description="Upper bound for a single channel send.",
    )

    # ── Config store keys ──
    chat_config_key: str = Field(default="chatIntegration", description="Chat config key.")
    email_config_key: str = Field(default="emailIntegration", description="Email config key.")

    # ── Chat webhook ──
    chat_default_username: str = Field(default="Errsole", description="Default display name.")
    chat_default_icon_url: str = Field(default=DEFAULT_ICON_URL, description="Default avatar.")

    # ── SMTP pool ──
    smtp_max_connections: int = Field(default=5, ge=1, description="Max open SMTP connections.")
    smtp_max_messages: int = Field(
        default=100,
        ge=1,
        description="Messages per connection before it is recycled.",
    )
    smtp_rate_limit: int = Field(default=10, ge=1, description="Max messages per second.")
    smtp_connect_timeout_s: float = Field(
        default=10.0,
        gt=0.0,
        description="SMTP connect timeout.",
    )

    # ── Logging ──
    log_level: str = Field(default="INFO", description="Logging level.")
    log_json: bool = Field(default=True, description="Render logs as JSON.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton.

    Returns:
        The global ``Settings`` instance.
    """
    return Settings()
