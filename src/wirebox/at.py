"""Annotation vocabulary of the web layer.

    class UserController:
        rest_controller: at.RestController
        request_mapping: Annotated[at.RequestMapping, StructTag('value:"/users"')]

        def get(self, _: ListUsers) -> BaseResponse: ...

    class ListUsers:
        get_mapping: Annotated[at.GetMapping, StructTag('value:"/"')]
        ok: Annotated[at.Response, StructTag('code:"200" description:"users listed"')]
"""
from __future__ import annotations

from wirebox.core.annotation import Annotation


class RestController(Annotation):
    """Marks a class as an HTTP controller."""


class RequestMapping(Annotation):
    """Route path (``value``) and HTTP method. An empty method means GET."""

    method: str = ""


class GetMapping(RequestMapping):
    method: str = "GET"


class PostMapping(RequestMapping):
    method: str = "POST"


class PutMapping(RequestMapping):
    method: str = "PUT"


class PatchMapping(RequestMapping):
    method: str = "PATCH"


class DeleteMapping(RequestMapping):
    method: str = "DELETE"


class Response(Annotation):
    """Documented response of a route; the first one found sets the status code."""

    code: int = 200
    description: str = ""
