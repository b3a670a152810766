"""Type descriptors for plain classes: flattened field lists, kinds, naming.

Fields are the class-level type annotations of a class and its bases.
``Optional[X]`` is treated like a reference to ``X``; ``Annotated[X, tag]``
carries the field's tag literal.
"""
from __future__ import annotations

import dataclasses
import enum
import inspect
import re
import sys
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

from wirebox.core.errors import UnsupportedInjectionTypeError
from wirebox.core.structtag import StructTag, TagPair

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, list, tuple, dict, set, frozenset)
_TRUE = {"true", "t", "1", "yes", "y", "on"}
_FALSE = {"false", "f", "0", "no", "n", "off", ""}


@dataclass(frozen=True)
class StructField:
    """One entry of a class's flattened field list."""

    name: str
    type: Any
    tag: StructTag
    index: int


def _resolve_annotation(ann: str, owner: Any) -> Any:
    """Resolve a string annotation (from __future__ annotations) to the actual class."""
    mod = sys.modules.get(owner.__module__)
    if mod is not None and hasattr(mod, ann):
        return getattr(mod, ann)
    return ann


def type_hints(obj: Any) -> dict[str, Any]:
    """Annotations of a class (bases first) or a function, with Annotated extras kept."""
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError):
        pass
    hints: dict[str, Any] = {}
    owners = reversed(obj.__mro__) if isinstance(obj, type) else [obj]
    for owner in owners:
        try:
            annotations = inspect.get_annotations(owner)
        except TypeError:
            continue
        for name, ann in annotations.items():
            hints[name] = _resolve_annotation(ann, owner) if isinstance(ann, str) else ann
    return hints


def indirect_type(t: Any) -> Any:
    """Strip Optional and Annotated wrappers: ``Optional[Foo]`` -> ``Foo``."""
    origin = get_origin(t)
    if origin is Annotated:
        return indirect_type(get_args(t)[0])
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(t) if a is not type(None)]
        if len(args) == 1:
            return indirect_type(args[0])
    return t


def split_annotation(hint: Any) -> tuple[Any, StructTag]:
    """Split a field annotation into its plain type and its tag."""
    tag = StructTag()
    target = hint
    if get_origin(target) in (Union, types.UnionType):
        target = next((a for a in get_args(target) if a is not type(None)), target)
    if get_origin(target) is Annotated:
        for meta in target.__metadata__:
            if isinstance(meta, StructTag):
                tag = meta
                break
            if isinstance(meta, str):
                tag = StructTag(meta)
                break
    return indirect_type(hint), tag


def is_interface(t: Any) -> bool:
    """Abstract classes and protocols are interfaces: they cannot be instantiated."""
    if not isinstance(t, type) or get_origin(t) is not None:
        return False
    return bool(getattr(t, "_is_protocol", False)) or inspect.isabstract(t)


def is_struct_type(t: Any) -> bool:
    """True for user classes that can hold fields (not scalars, collections or interfaces)."""
    if not isinstance(t, type) or get_origin(t) is not None:
        return False
    if t.__module__ == "builtins" or issubclass(t, _SCALARS) or issubclass(t, enum.Enum):
        return False
    return not is_interface(t)


def is_struct(obj: Any) -> bool:
    """True for instances of struct types."""
    if obj is None or isinstance(obj, (type, types.ModuleType, types.FunctionType, types.MethodType)):
        return False
    return is_struct_type(type(obj))


def struct_type_of(obj: Any) -> type | None:
    """The struct type behind an instance or a class, or None."""
    if isinstance(obj, type):
        t = indirect_type(obj)
        return t if is_struct_type(t) else None
    if is_struct(obj):
        return type(obj)
    return None


def deep_fields(cls: Any) -> list[StructField]:
    """Flattened field list of a class: inherited fields first, ClassVars skipped."""
    if not is_struct_type(cls):
        return []
    fields: list[StructField] = []
    for name, hint in type_hints(cls).items():
        if hint is ClassVar or get_origin(hint) is ClassVar:
            continue
        field_type, tag = split_annotation(hint)
        fields.append(StructField(name=name, type=field_type, tag=tag, index=len(fields)))
    return fields


def is_frozen(obj: Any) -> bool:
    cls = type(obj)
    return dataclasses.is_dataclass(cls) and cls.__dataclass_params__.frozen


def can_set(obj: Any, name: str) -> bool:
    """Whether the field can be assigned: public, not frozen, not a read-only property."""
    if obj is None or name.startswith("_") or is_frozen(obj):
        return False
    attr = inspect.getattr_static(type(obj), name, None)
    if isinstance(attr, property) and attr.fset is None:
        return False
    return True


def is_assignable(value: Any, target: Any) -> bool:
    """Runtime check of a value against a field type; non-class types are not checked."""
    target = indirect_type(target)
    if target is Any or not isinstance(target, type) or get_origin(target) is not None:
        return True
    if is_interface(target):
        return True
    return isinstance(value, target)


def convert(source: str | TagPair, target: Any) -> Any:
    """Convert a tag literal (or a parsed pair) to the target type.

    Scalars take the whole string, or the pair's first segment; lists and
    tuples take every comma separated segment.
    """
    if isinstance(source, TagPair):
        text, segments = source.name, source.segments
    else:
        text, segments = source, source.split(",")
    target = indirect_type(target)
    origin = get_origin(target) or target

    if target is Any or target is str or target is object:
        return text
    if target is bool:
        lowered = text.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    elif target in (int, float):
        try:
            return target(text.strip())
        except ValueError:
            pass
    elif origin in (list, tuple, set, frozenset):
        args = [a for a in get_args(target) if a is not Ellipsis]
        item_type = args[0] if args else str
        return origin(convert(segment.strip(), item_type) for segment in segments)
    raise UnsupportedInjectionTypeError(
        f"[inject] unsupported injection type: can not convert {text!r} to {target!r}"
    )


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def upper_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def lower_camel(name: str) -> str:
    """Registry name of a field or type: ``test_service``/``TestService`` -> ``testService``."""
    parts = [p for p in name.split("_") if p]
    if len(parts) > 1:
        name = parts[0] + "".join(upper_first(p) for p in parts[1:])
    elif parts:
        name = parts[0]
    return lower_first(name)


def snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def parse_object_name(obj: Any, suffix: str = "") -> str:
    """Lower-first class name of obj with suffix removed: ValueTag -> value."""
    cls = obj if isinstance(obj, type) else type(obj)
    name = cls.__name__
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return lower_first(name)


def module_base_name(t: Any) -> str:
    """Last segment of the module that declares t."""
    return getattr(t, "__module__", "").rsplit(".", 1)[-1]
