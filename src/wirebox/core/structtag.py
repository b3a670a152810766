"""Tag literals attached to fields: key:"value" pairs separated by spaces.

A value is split on commas: the first segment is the pair's name, the rest are
its options. ``value:"foo,option 1,option 2"`` has name ``foo`` and options
``["option 1", "option 2"]``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field

from wirebox.core.errors import TagSyntaxError

TAG_PAIR_SYNTAX = "bad syntax for struct tag pair"
TAG_KEY_SYNTAX = "bad syntax for struct tag key"
TAG_VALUE_SYNTAX = "bad syntax for struct tag value"


@dataclass(frozen=True)
class TagPair:
    key: str
    value: str
    name: str
    options: list[str] = field(default_factory=list)

    @property
    def segments(self) -> list[str]:
        return [self.name, *self.options]


def _scan(literal: str, strict: bool) -> list[TagPair]:
    pairs: list[TagPair] = []
    tag = literal
    while tag:
        i = 0
        while i < len(tag) and tag[i] == " ":
            i += 1
        tag = tag[i:]
        if not tag:
            break

        i = 0
        while i < len(tag) and tag[i] > " " and tag[i] not in ':"' and tag[i] != "\x7f":
            i += 1
        if i == 0:
            if strict:
                raise TagSyntaxError(TAG_KEY_SYNTAX)
            break
        if i + 1 >= len(tag) or tag[i] != ":":
            if strict:
                raise TagSyntaxError(TAG_PAIR_SYNTAX)
            break
        if tag[i + 1] != '"':
            if strict:
                raise TagSyntaxError(TAG_VALUE_SYNTAX)
            break
        key = tag[:i]
        tag = tag[i + 1:]

        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= len(tag):
            if strict:
                raise TagSyntaxError(TAG_VALUE_SYNTAX)
            break
        quoted = tag[: i + 1]
        tag = tag[i + 1:]

        try:
            value = json.loads(quoted)
        except ValueError:
            if strict:
                raise TagSyntaxError(TAG_VALUE_SYNTAX) from None
            break
        name, *options = value.split(",")
        pairs.append(TagPair(key=key, value=value, name=name, options=options))
    return pairs


@dataclass(frozen=True)
class StructTag:
    """Tag literal of a field, e.g. ``StructTag('value:"/test" age:"18"')``.

    Use it as ``typing.Annotated`` metadata::

        mapping: Annotated[RequestMapping, StructTag('value:"/users"')]
    """

    literal: str = ""

    def parse(self) -> list[TagPair]:
        """Strict parse; raises TagSyntaxError on malformed literals."""
        return _scan(self.literal, strict=True)

    def lookup(self, key: str) -> tuple[str, bool]:
        """Raw literal for key. Stops quietly at the first malformed pair."""
        for pair in _scan(self.literal, strict=False):
            if pair.key == key:
                return pair.value, True
        return "", False

    def get(self, key: str, default: str | None = None) -> str | None:
        value, ok = self.lookup(key)
        return value if ok else default

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key)[1]

    def __bool__(self) -> bool:
        return bool(self.literal)

    def __str__(self) -> str:
        return self.literal
