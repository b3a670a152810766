"""Controller module: one object per controller; routes come from its annotations."""
from __future__ import annotations

import dataclasses
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from wirebox import at
from wirebox.core import annotation, reflector
from wirebox.core.errors import InterfaceNotImplementedError
from wirebox.core.injector import INIT_METHOD_NAME
from wirebox.web.module import Module

if TYPE_CHECKING:
    from wirebox.web.app import Application

HTTP_METHODS = ("get", "post", "put", "patch", "delete")


@dataclass(frozen=True)
class RouteInfo:
    path: str
    method: str
    handler: str
    status_code: int = 200


def _join(prefix: str, path: str) -> str:
    path = path.strip("/")
    prefix = prefix.rstrip("/")
    return f"{prefix}/{path}" if path else (prefix or "/")


def controller_path(controller: Any) -> str:
    """Base path: the controller's RequestMapping value, else its class name without Controller."""
    mapping = annotation.get_field(controller, at.RequestMapping)
    if mapping is not None and mapping.value is not None and mapping.value.value:
        return _join("/", mapping.value.value)
    name = type(controller).__name__
    if name.endswith("Controller") and name != "Controller":
        name = name[: -len("Controller")]
    return "/" + reflector.lower_first(name)


def _parameters(func: Callable[..., Any]) -> list[tuple[str, Any]]:
    hints = reflector.type_hints(func)
    params = list(inspect.signature(func).parameters)[1:]
    return [(name, reflector.indirect_type(hints.get(name))) for name in params]


def _status_code(mapping_obj: Any) -> int:
    for field in annotation.find(mapping_obj, at.Response):
        if field.value is not None:
            return field.value.code
        code = field.tag.get("code")
        if code:
            return reflector.convert(code, int)
    return 200


def _to_response(result: Any, status_code: int) -> Response:
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=status_code)
    if dataclasses.is_dataclass(result) and not isinstance(result, type):
        result = dataclasses.asdict(result)
    return JSONResponse(result, status_code=status_code)


async def _read_body(request: Request) -> dict[str, Any]:
    if request.method == "GET":
        return dict(request.query_params)
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class ControllerModule(Module):
    """
    Routes of one controller. The controller must carry at.RestController.

    A method becomes a route when one of its parameters is a class carrying a
    RequestMapping (GetMapping, PostMapping, ...), or when its name starts
    with an HTTP verb: ``post_say_hello`` -> ``POST <prefix>/sayHello``.
    """

    def __init__(self, controller: Any) -> None:
        if not annotation.contains(controller, at.RestController):
            raise InterfaceNotImplementedError(
                f"[inject] {type(controller).__name__} is not annotated with RestController"
            )
        self.controller = controller
        self.routes: list[RouteInfo] = []

    def register_into(self, app: Application) -> None:
        annotation.inject_into_fields(self.controller)
        prefix = controller_path(self.controller)
        for name, func in inspect.getmembers(type(self.controller), inspect.isfunction):
            if name.startswith("_") or name == INIT_METHOD_NAME:
                continue
            params = _parameters(func)
            mapping_param = next(
                (
                    (p, t) for p, t in params
                    if reflector.is_struct_type(t) and annotation.contains_child(t, at.RequestMapping)
                ),
                None,
            )
            if mapping_param is not None:
                mapping_obj = mapping_param[1]()
                annotation.inject_into_fields(mapping_obj)
                mapping = next(f for f in annotation.get_fields(mapping_obj) if issubclass(f.type, at.RequestMapping))
                route = RouteInfo(
                    path=_join(prefix, mapping.value.value),
                    method=(mapping.value.method or "GET").upper(),
                    handler=name,
                    status_code=_status_code(mapping_obj),
                )
                mapped: tuple[str, type] | None = mapping_param
            else:
                verb, _, rest = name.partition("_")
                if verb not in HTTP_METHODS or not rest:
                    continue
                route = RouteInfo(path=_join(prefix, reflector.lower_camel(rest)), method=verb.upper(), handler=name)
                mapped = None
            self.routes.append(route)
            app.add_route(
                route.path,
                self._make_endpoint(getattr(self.controller, name), params, mapped, route.status_code),
                methods=[route.method],
            )

    def _make_endpoint(
        self,
        handler: Callable[..., Any],
        params: list[tuple[str, Any]],
        mapped: tuple[str, type] | None,
        status_code: int,
    ) -> Callable[[Request], Any]:
        async def endpoint(request: Request) -> Response:
            kwargs: dict[str, Any] = {}
            if mapped is not None:
                # fresh per request; handlers may mutate it
                mapping_obj = mapped[1]()
                annotation.inject_into_fields(mapping_obj)
                kwargs[mapped[0]] = mapping_obj
            for name, param_type in params:
                if name in kwargs:
                    continue
                if param_type is Request:
                    kwargs[name] = request
                elif dataclasses.is_dataclass(param_type):
                    kwargs[name] = param_type(**await _read_body(request))
                else:
                    kwargs[name] = None
            result = handler(**kwargs)
            if hasattr(result, "__await__"):
                result = await result
            return _to_response(result, status_code)

        return endpoint
