"""
Data models for errsole-alerts.

Defines the alert type labels, the optional per-send metadata
(:class:`AlertContext`) and the per-channel configuration decoded from the
host application's config store.  Stored key names (``status``, ``url``,
``receivers``…) are kept as aliases so existing integration records decode
unchanged.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class AlertType(str, enum.Enum):
    """Well-known alert labels.

    Channels accept any string; these are the ones the host emits.
    """

    ALERT = "Alert"
    UNCAUGHT_EXCEPTION = "Uncaught Exception"
    TEST = "Test"


def alert_type_label(alert_type: AlertType | str) -> str:
    """Return the display label for *alert_type*."""
    if isinstance(alert_type, AlertType):
        return alert_type.value
    return str(alert_type)


class AlertContext(BaseModel):
    """Optional metadata used to enrich a rendered alert.

    Attributes:
        application_name: Application the alert originates from.
        environment_name: Deployment environment (production, staging…).
        server_name: Host that produced the alert.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    application_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("appName", "applicationName", "application_name"),
    )
    environment_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("environmentName", "environment_name"),
    )
    server_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("serverName", "server_name"),
    )

    @field_validator("application_name", "environment_name", "server_name", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if value is None:
            return None
        value = str(value)
        return value or None

    @classmethod
    def coerce(cls, context: AlertContext | Mapping[str, Any] | None) -> AlertContext:
        """Build an ``AlertContext`` from a model, a mapping, or ``None``."""
        if context is None:
            return cls()
        if isinstance(context, AlertContext):
            return context
        return cls.model_validate(dict(context))

    @property
    def is_empty(self) -> bool:
        """``True`` when no metadata field is present."""
        return not (self.application_name or self.environment_name or self.server_name)


class ChannelConfig(BaseModel):
    """Fields shared by every channel's stored configuration.

    ``enabled`` keeps the stored ``status`` value as-is.  Only an explicit
    JSON ``false`` disables the channel; an absent flag or any other value
    (``0``, ``"false"``, ``"active"``...) leaves it enabled.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    enabled: Any = Field(default=None, alias="status")

    @property
    def is_disabled(self) -> bool:
        return self.enabled is False


class ChatConfig(ChannelConfig):
    """Chat webhook integration (``chatIntegration``).

    Attributes:
        webhook_url: Incoming-webhook URL the payload is POSTed to.
        display_name: Sender name shown in the channel.
        icon_url: Sender avatar URL.
    """

    webhook_url: str = Field(..., alias="url", min_length=1)
    display_name: str | None = Field(default=None, alias="username")
    icon_url: str | None = Field(default=None)


class EmailConfig(ChannelConfig):
    """Email integration (``emailIntegration``).

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port; 465 selects implicit TLS.
        username: SMTP auth user.
        password: SMTP auth password.
        sender: ``From`` address.
        recipients: One address or a list of addresses.
    """

    host: str = Field(..., min_length=1)
    port: int = Field(..., ge=1, le=65535)
    username: str | None = Field(default=None)
    password: str | None = Field(default=None)
    sender: str | None = Field(default=None)
    recipients: str | list[str] | None = Field(default=None, alias="receivers")

    @field_validator("port", mode="before")
    @classmethod
    def _port_from_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return int(value.strip())
        return value

    @property
    def recipient_list(self) -> list[str]:
        """Recipients normalised to a list (a comma-separated string is split)."""
        if not self.recipients:
            return []
        if isinstance(self.recipients, str):
            return [r.strip() for r in self.recipients.split(",") if r.strip()]
        return [r for r in self.recipients if r]
