"""
Message rendering for errsole-alerts channels.

Pure functions that turn a raw message, an alert type and optional
:class:`AlertContext` metadata into a channel payload: Slack Block Kit
blocks for the chat webhook, and a subject/body pair for email.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from .models import AlertContext, AlertType, alert_type_label

DEFAULT_PRODUCT = "Errsole"


class EmailContent(NamedTuple):
    subject: str
    body: str


def _labelled_line(label: str, value: str) -> dict[str, Any]:
    return {
        "type": "rich_text",
        "elements": [
            {
                "type": "rich_text_section",
                "elements": [
                    {"type": "text", "text": f"{label}: ", "style": {"bold": True}},
                    {"type": "text", "text": value},
                ],
            },
        ],
    }


def build_chat_blocks(
    message: str,
    alert_type: AlertType | str,
    context: AlertContext | None = None,
    *,
    product: str = DEFAULT_PRODUCT,
) -> dict[str, Any]:
    """Build the Slack Block Kit payload for an alert.

    Format:
        :warning: *{product}: {type}*
        App Name: {app} app
        Environment Name: {env} environment
        Server Name: {server}
        ```{message}```

    Metadata lines appear only for fields present in *context*.  The message
    goes into a preformatted block untouched.
    """
    context = context or AlertContext()
    label = alert_type_label(alert_type)

    blocks: list[dict[str, Any]] = [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f" :warning: *{product}: {label}*"},
        },
    ]
    if context.application_name:
        blocks.append(_labelled_line("App Name", f"{context.application_name} app"))
    if context.environment_name:
        blocks.append(_labelled_line("Environment Name", f"{context.environment_name} environment"))
    if context.server_name:
        blocks.append(_labelled_line("Server Name", context.server_name))
    blocks.append(
        {
            "type": "rich_text",
            "elements": [
                {
                    "type": "rich_text_preformatted",
                    "elements": [{"type": "text", "text": message}],
                },
            ],
        }
    )
    return {"blocks": blocks}


def build_email_subject(
    alert_type: AlertType | str,
    context: AlertContext | None = None,
    *,
    product: str = DEFAULT_PRODUCT,
) -> str:
    context = context or AlertContext()
    label = alert_type_label(alert_type)
    app, env = context.application_name, context.environment_name

    if app and env:
        return f"{product}: {label} ({app} app, {env} environment)"
    if app:
        return f"{product}: {label} ({app} app)"
    if env:
        return f"{product}: {label} ({env} environment)"
    return f"{product}: {label}"


def build_email_body(message: str, context: AlertContext | None = None) -> str:
    """Prefix *message* with one ``Label: value`` line per metadata field.

    With no metadata the message is returned verbatim.
    """
    context = context or AlertContext()
    if context.is_empty:
        return message

    lines: list[str] = []
    if context.application_name:
        lines.append(f"App Name: {context.application_name}")
    if context.environment_name:
        lines.append(f"Environment Name: {context.environment_name}")
    if context.server_name:
        lines.append(f"Server Name: {context.server_name}")
    return "\n".join(lines) + "\n\n" + message


def build_email(
    message: str,
    alert_type: AlertType | str,
    context: AlertContext | None = None,
    *,
    product: str = DEFAULT_PRODUCT,
) -> EmailContent:
    """Render the email subject and plain-text body for an alert."""
    return EmailContent(
        subject=build_email_subject(alert_type, context, product=product),
        body=build_email_body(message, context),
    )
