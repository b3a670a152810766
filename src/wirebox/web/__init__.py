from wirebox.web.app import Application
from wirebox.web.model import BaseResponse
from wirebox.web.module import Module
from wirebox.web.routing import ControllerModule, RouteInfo

__all__ = [
    "Application",
    "BaseResponse",
    "ControllerModule",
    "Module",
    "RouteInfo",
]
