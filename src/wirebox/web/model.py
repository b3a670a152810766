"""Response model shared by controllers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class BaseResponse:
    code: int = 200
    message: str = "success"
    data: Any = None
