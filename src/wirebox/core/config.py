"""Application config: a single object passed by the user, available via DI and to value tags."""
from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class Config:
    """
    Application config. User creates their own class or instance
    and passes to Application(config=...); then available via the instance
    registry under ``config`` and as properties for ``value`` tags.
    """

    @classmethod
    def load_from_env(cls, prefix: str = "APP_", **defaults: Any) -> dict[str, Any]:
        """Load from os.environ with prefix and defaults. APP_NAME=demo -> {"name": "demo"}."""
        result = dict(defaults)
        for key, value in os.environ.items():
            if key.startswith(prefix):
                name = key[len(prefix):].lower()
                result[name] = value
        return result

    @staticmethod
    def properties_of(config: Any) -> dict[str, Any]:
        """Flat property view of a config: mapping, dataclass or plain object."""
        if config is None:
            return {}
        if isinstance(config, Mapping):
            return dict(config)
        if dataclasses.is_dataclass(config) and not isinstance(config, type):
            return dataclasses.asdict(config)
        return {k: v for k, v in vars(config).items() if not k.startswith("_")}


def _lookup(properties: Mapping[str, Any], key: str) -> Any:
    for candidate in (key, key.replace(".", "_"), key.lower(), key.replace(".", "_").lower()):
        if candidate in properties:
            return properties[candidate]
    return None


def resolve_placeholders(text: str, properties: Mapping[str, Any]) -> str:
    """Replace ``${key}`` and ``${key:default}`` with property values.

    Unknown keys without a default are left as they are.
    """

    def replace(match: re.Match[str]) -> str:
        key, default = match.group(1).strip(), match.group(2)
        value = _lookup(properties, key)
        if value is None:
            return default if default is not None else match.group(0)
        return str(value)

    return _PLACEHOLDER.sub(replace, text)
