"""Instance registry: name-keyed singletons shared by every injection."""
from __future__ import annotations

from typing import Any, Iterator

from wirebox.core import reflector


class InstanceRegistry:
    """
    Register instances by name and look them up for injection.
    Names are lower camel case: an instance of ``TestService`` lives under ``testService``.
    Entries are never evicted. Not thread safe: populate and inject during startup.
    """

    def __init__(self) -> None:
        self._instances: dict[str, Any] = {}

    def save(self, name: str, instance: Any) -> None:
        """Store instance under name (normalized to lower camel case)."""
        self._instances[reflector.lower_camel(name)] = instance

    def register_instance(self, instance: Any, name: str | None = None) -> None:
        """Register a ready-made instance under name, or under its type name."""
        self.save(name or type(instance).__name__, instance)

    def get(self, name: str) -> Any:
        return self._instances.get(reflector.lower_camel(name))

    def find(self, name: str, instance_type: Any = None) -> Any:
        """Resolve by exact name; for interface types fall back to any instance
        whose class hierarchy has a class with the interface's name."""
        instance = self.get(name)
        if instance is None and reflector.is_interface(instance_type):
            iface_name = instance_type.__name__
            for candidate in self._instances.values():
                if candidate is not None and any(c.__name__ == iface_name for c in type(candidate).__mro__):
                    return candidate
        return instance

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._instances.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and reflector.lower_camel(name) in self._instances

    def __len__(self) -> int:
        return len(self._instances)
