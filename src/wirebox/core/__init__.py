from wirebox.core.annotation import (
    AnnotatedField,
    Annotation,
    contains,
    contains_child,
    find,
    get_field,
    get_fields,
    inject_into_field,
    inject_into_fields,
)
from wirebox.core.config import Config
from wirebox.core.container import InstanceRegistry
from wirebox.core.errors import (
    IllegalArgumentError,
    InjectError,
    InterfaceNotImplementedError,
    InvalidObjectError,
    InvalidTagNameError,
    TagAlreadyExistsError,
    TagIsNilError,
    TagSyntaxError,
    UnsupportedInjectionTypeError,
)
from wirebox.core.injector import Injector, add_tag, default_injector, into_object, reset_default_injector
from wirebox.core.structtag import StructTag
from wirebox.core.tags import InjectTag, Tag, TagRegistry, ValueTag

__all__ = [
    "AnnotatedField",
    "Annotation",
    "Config",
    "IllegalArgumentError",
    "InjectError",
    "InjectTag",
    "Injector",
    "InstanceRegistry",
    "InterfaceNotImplementedError",
    "InvalidObjectError",
    "InvalidTagNameError",
    "StructTag",
    "Tag",
    "TagAlreadyExistsError",
    "TagIsNilError",
    "TagRegistry",
    "TagSyntaxError",
    "UnsupportedInjectionTypeError",
    "ValueTag",
    "add_tag",
    "contains",
    "contains_child",
    "default_injector",
    "find",
    "get_field",
    "get_fields",
    "inject_into_field",
    "inject_into_fields",
    "into_object",
    "reset_default_injector",
]
