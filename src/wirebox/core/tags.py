"""Tag decoders: pluggable strategies that turn a field's tag into a value.

A decoder is registered under its class name without the ``Tag`` suffix,
lower camel cased, and that name is the tag key it handles: ``ValueTag``
decodes ``value:"..."``, a user ``RoutePathTag`` would decode ``routePath:"..."``.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Iterator

from wirebox.core import reflector
from wirebox.core.config import Config, resolve_placeholders
from wirebox.core.container import InstanceRegistry
from wirebox.core.errors import (
    InterfaceNotImplementedError,
    InvalidTagNameError,
    TagAlreadyExistsError,
    TagIsNilError,
)
from wirebox.core.reflector import StructField

logger = logging.getLogger(__name__)


class Tag(ABC):
    """Decoder for one tag key."""

    @abstractmethod
    def decode(self, obj: Any, field: StructField, literal: str) -> Any:
        """Value to inject into field of obj, or None when the tag does not apply."""

    def is_singleton(self) -> bool:
        """Whether decoded values are cached in the instance registry."""
        return False


def _is_singleton(tag: Any) -> bool:
    check = getattr(tag, "is_singleton", None)
    return bool(check()) if callable(check) else False


class TagRegistry:
    """Registered decoders, consulted in registration order."""

    def __init__(self) -> None:
        self._tags: dict[str, Tag] = {}

    def add(self, tag: Tag) -> str:
        """Register tag under its derived name and return the name."""
        if tag is None:
            raise TagIsNilError()
        if isinstance(tag, type) or not callable(getattr(tag, "decode", None)):
            raise InterfaceNotImplementedError(f"[inject] {tag!r} is not a tag decoder instance")
        name = reflector.parse_object_name(tag, "Tag")
        if not name:
            raise InvalidTagNameError()
        if name in self._tags:
            raise TagAlreadyExistsError(f"[inject] tag is already exist: {name}")
        self._tags[name] = tag
        logger.debug("Added tag %s (%s)", name, type(tag).__name__)
        return name

    def get(self, name: str) -> Tag | None:
        return self._tags.get(name)

    def decode(self, obj: Any, field: StructField, instances: InstanceRegistry) -> Any:
        """Value from the first decoder whose key is on field and that returns non-None.

        Only one tag drives the injection of a field.
        """
        for name, tag in self._tags.items():
            literal, ok = field.tag.lookup(name)
            if not ok:
                continue
            value = tag.decode(obj, field, literal)
            if value is not None:
                if _is_singleton(tag):
                    instances.save(field.name, value)
                return value
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tags))

    def __contains__(self, name: object) -> bool:
        return name in self._tags

    def __len__(self) -> int:
        return len(self._tags)


class ValueTag(Tag):
    """``value:"${app.name:demo}"``: literal value with property placeholders.

    Properties come from the given mapping, else from APP_ environment
    variables. Only scalar and list fields are decoded.
    """

    def __init__(self, properties: Mapping[str, Any] | None = None) -> None:
        self._properties = properties

    def decode(self, obj: Any, field: StructField, literal: str) -> Any:
        if reflector.is_struct_type(field.type) or reflector.is_interface(field.type):
            return None
        properties = self._properties if self._properties is not None else Config.load_from_env()
        return reflector.convert(resolve_placeholders(literal, properties), field.type)


class InjectTag(Tag):
    """``inject:"name"``: instance from the registry by name (or by the field's
    type name when empty), created with factory when missing."""

    def __init__(self, instances: InstanceRegistry, factory: Callable[[type], Any] | None = None) -> None:
        self._instances = instances
        self._factory = factory

    def decode(self, obj: Any, field: StructField, literal: str) -> Any:
        name = literal or getattr(field.type, "__name__", field.name)
        instance = self._instances.find(name, field.type)
        if instance is None and self._factory is not None and reflector.is_struct_type(field.type):
            instance = self._factory(field.type)
        return instance

    def is_singleton(self) -> bool:
        return True
