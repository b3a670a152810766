"""Pluggable route providers for Application."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wirebox.web.app import Application


@runtime_checkable
class Module(Protocol):
    """Anything that adds routes or instances to an application.

    ControllerModule is the built-in one; app.register(module) calls
    register_into once, after the app's injector exists.
    """

    def register_into(self, app: Application) -> None:
        ...
