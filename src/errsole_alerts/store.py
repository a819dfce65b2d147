"""
Config store access for errsole-alerts.

The host application owns persistence.  It exposes ``get_config(key)``
returning ``{"item": {"value": "<json>"}}``, ``{"item": None}`` or ``None``.
This module defines that contract as a :class:`ConfigStore` protocol, an
in-memory implementation, and the helper channels use to fetch and decode
their settings on every send.
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

import structlog
from pydantic import ValidationError

from .errors import ConfigMalformedError, ConfigMissingError
from .models import ChannelConfig

logger = structlog.get_logger()

ConfigT = TypeVar("ConfigT", bound=ChannelConfig)


class ConfigStore(Protocol):
    """Anything with a ``get_config(key)`` method.

    The method may be a coroutine function or a plain function.
    """

    def get_config(self, key: str) -> Any: ...


class MemoryConfigStore:
    """Dict-backed :class:`ConfigStore`.

    Values are stored JSON-encoded, exactly as a persistent store would hold
    them, so decoding follows the same path as production.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._items: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set_config(key, value)

    async def get_config(self, key: str) -> dict[str, Any]:
        value = self._items.get(key)
        if value is None:
            return {"item": None}
        return {"item": {"name": key, "value": value}}

    def set_config(self, key: str, value: Mapping[str, Any] | str) -> None:
        """Store *value* under *key* (mappings are JSON-encoded)."""
        self._items[key] = value if isinstance(value, str) else json.dumps(dict(value))

    def delete_config(self, key: str) -> bool:
        """Remove *key*; returns ``True`` if it existed."""
        return self._items.pop(key, None) is not None


async def fetch_raw_config(store: ConfigStore, key: str) -> str:
    """Return the serialised value stored under *key*.

    Raises:
        ConfigMissingError: The store returned ``None`` or an empty ``item``.
        ConfigMalformedError: The item has no string ``value``.
    """
    data = store.get_config(key)
    if inspect.isawaitable(data):
        data = await data

    item = data.get("item") if isinstance(data, Mapping) else None
    if not item:
        raise ConfigMissingError(f"no config stored for {key!r}")

    value = item.get("value") if isinstance(item, Mapping) else None
    if not isinstance(value, str):
        raise ConfigMalformedError(f"config {key!r} has no string value")
    return value


async def load_channel_config(store: ConfigStore, key: str, model: type[ConfigT]) -> ConfigT:
    """Fetch and decode the configuration stored under *key* into *model*.

    Nothing is cached, so changes in the store apply to the next call.

    Raises:
        ConfigMissingError: Nothing is stored under *key*.
        ConfigMalformedError: The value is not a JSON object matching *model*.
    """
    raw = await fetch_raw_config(store, key)
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ConfigMalformedError(f"config {key!r} is not valid JSON") from exc
    if not isinstance(decoded, dict):
        raise ConfigMalformedError(f"config {key!r} is not a JSON object")

    try:
        return model.model_validate(decoded)
    except ValidationError as exc:
        logger.debug("config_validation_failed", key=key, errors=exc.error_count())
        raise ConfigMalformedError(f"config {key!r} failed validation") from exc
