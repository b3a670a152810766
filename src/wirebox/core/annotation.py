"""Annotations: marker classes declared as (tagged) fields of other classes.

A marker is a subclass of :class:`Annotation`. A class carries a marker by
declaring a field of that type, with the marker's settings in the field's
tag::

    class UserController:
        rest_controller: RestController
        mapping: Annotated[RequestMapping, StructTag('value:"/users"')]

A marker that subclasses another marker specializes it: ``GetMapping`` is a
``RequestMapping``. :func:`contains` only looks at exact types, while
:func:`contains_child` also matches specializations.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, get_origin

from wirebox.core import reflector
from wirebox.core.errors import InvalidObjectError
from wirebox.core.structtag import StructTag

logger = logging.getLogger(__name__)


class Annotation:
    """Base marker. ``value`` receives the first segment of the ``value`` tag."""

    value: str = ""

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{name}={getattr(self, name, None)!r}"
            for name, hint in reflector.type_hints(type(self)).items()
            if get_origin(hint) is not ClassVar
        )
        return f"{type(self).__name__}({attrs})"


@dataclass
class AnnotatedField:
    """A marker-typed field found on an object or a class.

    ``value`` is the marker instance currently held by ``owner``; both are
    None when the field was discovered on a class rather than an instance.
    """

    name: str
    type: type
    tag: StructTag
    value: Any = None
    owner: Any = None
    index: int = 0

    @property
    def settable(self) -> bool:
        return self.owner is not None and reflector.can_set(self.owner, self.name)


def is_annotation(t: Any) -> bool:
    return isinstance(t, type) and issubclass(t, Annotation)


def _marker_type(marker: Any) -> type:
    return marker if isinstance(marker, type) else type(marker)


def _direct_fields(obj: Any) -> list[AnnotatedField]:
    cls = reflector.struct_type_of(obj)
    if cls is None:
        return []
    owner = None if isinstance(obj, type) else obj
    fields: list[AnnotatedField] = []
    for f in reflector.deep_fields(cls):
        if not is_annotation(f.type):
            continue
        value = getattr(owner, f.name, None) if owner is not None else None
        if not isinstance(value, Annotation):
            value = None
        fields.append(
            AnnotatedField(name=f.name, type=f.type, tag=f.tag, value=value, owner=owner, index=f.index)
        )
    return fields


def _collect(obj: Any, fields: list[AnnotatedField], path: frozenset[type]) -> None:
    for f in _direct_fields(obj):
        fields.append(f)
        if f.type in path:
            continue
        _collect(f.value if f.value is not None else f.type, fields, path | {f.type})


def get_fields(obj: Any) -> list[AnnotatedField]:
    """All marker fields of obj, depth first: each field is followed by the
    marker fields declared inside its marker. Empty for non-struct input."""
    fields: list[AnnotatedField] = []
    _collect(obj, fields, frozenset())
    return fields


def get_field(obj: Any, marker: Any) -> AnnotatedField | None:
    """First field whose type is exactly marker. obj may be a class."""
    m = _marker_type(marker)
    return next((f for f in get_fields(obj) if f.type is m), None)


def contains(obj: Any, marker: Any) -> bool:
    """True if obj is marker, directly embeds it, or declares a field of exactly that type.

    obj may also be a list of fields returned by :func:`get_fields`.
    """
    m = _marker_type(marker)
    if isinstance(obj, (list, tuple)):
        return any(f.type is m for f in obj)
    cls = reflector.struct_type_of(obj)
    if cls is None:
        return False
    if cls is m or m in cls.__bases__:
        return True
    return any(f.type is m for f in _direct_fields(cls))


def contains_child(obj: Any, marker: Any) -> bool:
    """True if marker appears anywhere in the subtree, specializations included."""
    m = _marker_type(marker)
    fields = obj if isinstance(obj, (list, tuple)) else get_fields(obj)
    return any(issubclass(f.type, m) for f in fields)


def _find(obj: Any, m: type, found: list[AnnotatedField], path: frozenset[type]) -> None:
    cls = reflector.struct_type_of(obj)
    if cls is None or cls in path:
        return
    path = path | {cls}
    owner = None if isinstance(obj, type) else obj
    for f in reflector.deep_fields(cls):
        if not reflector.is_struct_type(f.type):
            continue
        value = getattr(owner, f.name, None) if owner is not None else None
        if f.type is m or (is_annotation(m) and issubclass(f.type, m)):
            found.append(
                AnnotatedField(name=f.name, type=f.type, tag=f.tag, value=value, owner=owner, index=f.index)
            )
        _find(value if value is not None else f.type, m, found, path)


def find(obj: Any, marker: Any) -> list[AnnotatedField]:
    """Every field of type marker in obj's nested structure, not only the first.

    Specializations of a marker count as occurrences of it: ``find(obj,
    RequestMapping)`` also returns ``GetMapping`` fields.
    """
    found: list[AnnotatedField] = []
    _find(obj, _marker_type(marker), found, frozenset())
    return found


def inject_into_field(field: AnnotatedField) -> None:
    """Populate the marker held by field from the field's tag.

    The marker is created when the field is unset. Tag keys map onto the
    marker's attributes (``age:"18"`` sets ``age``); keys without a matching
    attribute are ignored. Attributes the field's tag leaves alone take the
    ``value`` tag of their own declaration, unless already assigned.
    """
    pairs = field.tag.parse()
    marker = field.value
    if marker is None:
        if not field.settable:
            raise InvalidObjectError(f"[inject] invalid object: field {field.name!r} can not be set")
        marker = field.type()
        setattr(field.owner, field.name, marker)
        field.value = marker

    hints = reflector.type_hints(type(marker))
    applied: set[str] = set()
    for pair in pairs:
        attr = pair.key if pair.key in hints else reflector.snake_case(pair.key)
        hint = hints.get(attr)
        if hint is None or get_origin(hint) is ClassVar or not reflector.can_set(marker, attr):
            continue
        setattr(marker, attr, reflector.convert(pair, hint))
        applied.add(attr)

    for attr, hint in hints.items():
        if attr in applied or attr in vars(marker) or get_origin(hint) is ClassVar:
            continue
        attr_type, attr_tag = reflector.split_annotation(hint)
        literal, ok = attr_tag.lookup("value")
        if not ok or reflector.is_struct_type(attr_type) or not reflector.can_set(marker, attr):
            continue
        setattr(marker, attr, reflector.convert(literal, attr_type))
    logger.debug("Injected annotation %r into field %s", marker, field.name)


def _inject_tree(obj: Any, path: frozenset[type]) -> None:
    for f in _direct_fields(obj):
        if f.type in path:
            continue
        inject_into_field(f)
        _inject_tree(f.value, path | {f.type})


def inject_into_fields(obj: Any) -> None:
    """Populate every marker field of obj, and the markers nested in them.

    A marker type is not populated again below itself, so self-referencing
    markers terminate.
    """
    if not reflector.is_struct(obj) or reflector.is_frozen(obj):
        raise InvalidObjectError()
    _inject_tree(obj, frozenset({type(obj)}))
