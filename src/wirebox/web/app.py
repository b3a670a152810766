"""Application: controllers and modules composed into a Starlette app."""
from __future__ import annotations

import logging
from typing import Any, Callable

from starlette.applications import Starlette
from starlette.routing import Route

from wirebox.core.config import Config
from wirebox.core.container import InstanceRegistry
from wirebox.core.injector import Injector
from wirebox.web.module import Module
from wirebox.web.routing import ControllerModule

logger = logging.getLogger(__name__)


class Application:
    """
    Application. Composed from controllers via register_controller(controller)
    and from modules via register(module). Controllers are wired by the
    injector before their routes are collected.
    """

    def __init__(self, config: Any = None, injector: Injector | None = None) -> None:
        if injector is None:
            properties = Config.properties_of(config) if config is not None else None
            injector = Injector(properties=properties)
        self._injector = injector
        self._modules: list[Module] = []
        self._routes: list[Route] = []
        if config is not None:
            self.container.register_instance(config)
            self.container.save("config", config)

    def register(self, module: Module) -> Application:
        """Register a module (ControllerModule, ...). Returns self for chaining."""
        module.register_into(self)
        self._modules.append(module)
        return self

    def register_controller(self, controller: Any) -> Application:
        """Register a controller class or instance: construct, inject, collect routes."""
        if isinstance(controller, type):
            controller = self._injector.instantiate(controller)
        self._injector.into_object(controller)
        self.container.register_instance(controller)
        return self.register(ControllerModule(controller))

    def add_route(self, path: str, endpoint: Callable[..., Any], methods: list[str] | None = None) -> None:
        """Add an HTTP route."""
        if methods is None:
            methods = ["GET"]
        self._routes.append(Route(path, endpoint, methods=methods))
        logger.debug("Mapped %s %s", ",".join(methods), path)

    @property
    def injector(self) -> Injector:
        return self._injector

    @property
    def container(self) -> InstanceRegistry:
        """Instance registry shared by every injection of this application."""
        return self._injector.instances

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def build(self) -> Starlette:
        """ASGI app serving the registered routes."""
        return Starlette(routes=list(self._routes))
