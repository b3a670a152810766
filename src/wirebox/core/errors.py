"""Injection errors. Every failure of the engine is one of these."""
from __future__ import annotations


class InjectError(Exception):
    """Root exception for injection and annotation errors."""

    default_message = "[inject] error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidObjectError(InjectError):
    """Target is None or not a struct-like object."""

    default_message = "[inject] invalid object"


class UnsupportedInjectionTypeError(InjectError):
    """Resolved value cannot be assigned or converted to the field type."""

    default_message = "[inject] unsupported injection type"


class IllegalArgumentError(InjectError):
    """Initializer parameter has the same type as its receiver."""

    default_message = "[inject] input argument type can not be the same as receiver"


class TagAlreadyExistsError(InjectError):
    default_message = "[inject] tag is already exist"


class TagIsNilError(InjectError):
    default_message = "[inject] tag is nil"


class InvalidTagNameError(InjectError):
    default_message = "[inject] invalid tag name, e.g. exampleTag"


class InterfaceNotImplementedError(InjectError):
    """Object lacks a capability (method or marker) it is expected to carry."""

    default_message = "[inject] interface is not implemented"


class TagSyntaxError(InjectError):
    """Tag literal does not follow the key:"value" grammar."""

    default_message = "bad syntax for struct tag pair"
