"""Dependency injection into object graphs.

For a target object the injector first resolves each field (instance
registry by name, then tag decoders) and descends into nested objects, then
calls the object's ``init`` method with its parameters resolved the same way.

Registries are plain dicts without locks: inject during application startup,
before concurrent work begins.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from wirebox.core import reflector
from wirebox.core.container import InstanceRegistry
from wirebox.core.errors import (
    IllegalArgumentError,
    InjectError,
    InvalidObjectError,
    UnsupportedInjectionTypeError,
)
from wirebox.core.tags import InjectTag, Tag, TagRegistry, ValueTag

T = TypeVar("T")

INIT_METHOD_NAME = "init"

logger = logging.getLogger(__name__)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class Injector:
    """
    Injection context: an instance registry plus tag decoders.
    A new injector comes with the ``inject`` and ``value`` tags registered.
    """

    def __init__(
        self,
        instances: InstanceRegistry | None = None,
        tags: TagRegistry | None = None,
        properties: Mapping[str, Any] | None = None,
    ) -> None:
        self.instances = instances if instances is not None else InstanceRegistry()
        if tags is None:
            tags = TagRegistry()
            tags.add(InjectTag(self.instances, self.instantiate))
            tags.add(ValueTag(properties))
        self.tags = tags
        self._constructing: set[type] = set()

    def add_tag(self, tag: Tag) -> str:
        """Register a tag decoder; returns the tag key it handles."""
        return self.tags.add(tag)

    def into_object(self, obj: Any) -> None:
        """Inject dependencies into obj and everything reachable from it.

        Raises InvalidObjectError when obj is not a struct-like instance.
        Already assigned fields are not rolled back on failure.
        """
        self._into_object(obj, set())

    def instantiate(self, cls: type[T]) -> T:
        """Create an instance of cls, resolving __init__ dependencies from the registry."""
        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            return cls()
        if cls in self._constructing:
            raise IllegalArgumentError(f"[inject] circular constructor dependency on {cls.__name__}")
        hints = reflector.type_hints(cls.__init__)
        kwargs: dict[str, Any] = {}
        self._constructing.add(cls)
        try:
            for name, param in sig.parameters.items():
                if param.kind in _VARIADIC:
                    continue
                optional = param.default is not inspect.Parameter.empty
                ann = hints.get(name, param.annotation)
                dependency = None
                if ann is not inspect.Parameter.empty and not isinstance(ann, str):
                    dependency = self._resolve(reflector.indirect_type(ann), receiver=cls, create=not optional)
                if dependency is None:
                    if optional:
                        continue
                    raise UnsupportedInjectionTypeError(
                        f"[inject] unsupported injection type: can not resolve {cls.__name__}({name})"
                    )
                kwargs[name] = dependency
        finally:
            self._constructing.discard(cls)
        return cls(**kwargs)

    def _into_object(self, obj: Any, visited: set[int]) -> None:
        if not reflector.is_struct(obj):
            logger.error("object: %r", obj)
            raise InvalidObjectError()
        if id(obj) in visited:
            return
        visited.add(id(obj))

        error = self._inject_fields(obj, visited)
        method_error = self._inject_method(obj, visited)
        if method_error is not None:
            error = method_error
        if error is not None:
            raise error

    def _inject_fields(self, obj: Any, visited: set[int]) -> InjectError | None:
        error: InjectError | None = None
        obj_type = type(obj)
        for field in reflector.deep_fields(obj_type):
            value = self.instances.find(field.name, field.type)
            if value is None:
                value = self.tags.decode(obj, field, self.instances)

            settable = reflector.can_set(obj, field.name)
            if value is not None and settable:
                if not reflector.is_assignable(value, field.type):
                    raise UnsupportedInjectionTypeError(
                        f"[inject] unsupported injection type: "
                        f"{type(value).__name__} into {obj_type.__name__}.{field.name}"
                    )
                setattr(obj, field.name, value)
                logger.debug("Injected %r into %s.%s", value, obj_type.__name__, field.name)

            current = getattr(obj, field.name, None)
            if settable and reflector.is_struct(current) and type(current) is not obj_type:
                try:
                    self._into_object(current, visited)
                except InjectError as e:
                    error = e
        return error

    def _inject_method(self, obj: Any, visited: set[int]) -> InjectError | None:
        obj_type = type(obj)
        method = getattr(obj_type, INIT_METHOD_NAME, None)
        if not inspect.isfunction(method):
            return None

        hints = reflector.type_hints(method)
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        error: InjectError | None = None
        for param in list(inspect.signature(method).parameters.values())[1:]:
            if param.kind in _VARIADIC:
                continue
            hint = hints.get(param.name)
            arg = None
            if hint is not None and not isinstance(hint, str):
                arg = self._resolve(reflector.indirect_type(hint), receiver=obj_type)
            if arg is None:
                logger.debug(
                    "Skipped %s.%s: parameter %s can not be resolved",
                    obj_type.__name__, INIT_METHOD_NAME, param.name,
                )
                return error

            if reflector.is_struct(arg) and type(arg) is not obj_type:
                try:
                    self._into_object(arg, visited)
                except InjectError as e:
                    error = e
            if param.kind is inspect.Parameter.KEYWORD_ONLY:
                kwargs[param.name] = arg
            else:
                args.append(arg)

        if error is None:
            method(obj, *args, **kwargs)
            logger.debug("Invoked %s.%s", obj_type.__name__, INIT_METHOD_NAME)
        return error

    def _resolve(self, param_type: Any, receiver: type | None = None, create: bool = True) -> Any:
        """Instance for a parameter type: by type name, then by module-qualified
        name (``service.UserRepo`` -> ``serviceUserRepo``), else a new instance
        for concrete types. Interfaces are never created."""
        name = getattr(param_type, "__name__", None)
        if not name:
            return None
        instance = self.instances.find(name, param_type)
        if instance is None:
            alternative = reflector.upper_first(reflector.module_base_name(param_type)) + name
            instance = self.instances.find(alternative, param_type)
        if instance is None and create and not reflector.is_interface(param_type):
            if param_type is receiver:
                raise IllegalArgumentError()
            instance = self.instantiate(param_type)
            self.instances.save(name, instance)
        return instance


_default_injector: Injector | None = None


def default_injector() -> Injector:
    """Process-wide injector used by the module level helpers."""
    global _default_injector
    if _default_injector is None:
        _default_injector = Injector()
    return _default_injector


def reset_default_injector() -> None:
    global _default_injector
    _default_injector = None


def into_object(obj: Any) -> None:
    default_injector().into_object(obj)


def add_tag(tag: Tag) -> str:
    return default_injector().add_tag(tag)
