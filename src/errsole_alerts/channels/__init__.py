"""
Alert channel implementations package for errsole-alerts.

Contains the abstract AlertChannel base class and the chat-webhook and
email implementations.
"""

from .base import AlertChannel, race_timeout
from .chat_channel import ChatChannel
from .email_channel import EmailChannel

__all__ = [
    "AlertChannel",
    "ChatChannel",
    "EmailChannel",
    "race_timeout",
]
