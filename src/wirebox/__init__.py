"""
Wirebox: annotation-driven dependency injection for web applications.
Objects declare dependencies as typed fields, tags and an init method;
the injector wires them from a registry of singletons.
"""
from wirebox.core import (
    Annotation,
    Config,
    Injector,
    StructTag,
    Tag,
    add_tag,
    into_object,
)

__all__ = [
    "Annotation",
    "Config",
    "Injector",
    "StructTag",
    "Tag",
    "add_tag",
    "into_object",
]
