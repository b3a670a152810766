"""Tests for core/annotation.py."""

from dataclasses import dataclass
from typing import Annotated, Optional

import pytest

from wirebox import at
from wirebox.core.annotation import (
    Annotation,
    contains,
    contains_child,
    find,
    get_field,
    get_fields,
    inject_into_field,
    inject_into_fields,
)
from wirebox.core.errors import InvalidObjectError, TagSyntaxError, UnsupportedInjectionTypeError
from wirebox.core.structtag import StructTag


class AtBaz(Annotation):
    code: Annotated[int, StructTag('value:"200"')] = 0


class AtFoo(Annotation):
    age: int = 0


class AtBar(Annotation):
    pass


class AtFooBar(AtFoo):
    code: Annotated[int, StructTag('value:"200"')] = 0


class AtFooBaz(AtFoo):
    code: Annotated[int, StructTag('value:"400"')] = 0


class MyObj:
    name: str = ""
    value: str = ""


class Foo(MyObj):
    at_baz: Annotated[AtBaz, StructTag('value:"baz"')]
    at_foo: Annotated[AtFoo, StructTag('value:"foo,option 1,option 2" age:"18"')]
    at_bar: Annotated[AtBar, StructTag('value:"bar"')]
    at_foo_bar: Annotated[AtFooBar, StructTag('value:"foobar" age:"12"')]
    at_foo_baz: Annotated[AtFooBaz, StructTag('value:"foobaz" age:"22"')]


class Bar:
    at_foo: Annotated[AtFoo, StructTag('value age:"25"')]
    at_bar: Annotated[AtBar, StructTag('value:"bar"')]


class OnlySpecialized:
    at_foo_bar: Annotated[AtFooBar, StructTag('value:"foobar"')]


class AtNested(Annotation):
    inner: Annotated[AtBar, StructTag('value:"inner"')]


class Outer:
    first: Annotated[AtFoo, StructTag('value:"first"')]
    nested: Annotated[AtNested, StructTag('value:"nested"')]
    last: AtBaz


class AtOptions(Annotation):
    roles: list[str] = []
    enabled: bool = False
    context_path: str = ""


class WithOptions:
    options: Annotated[AtOptions, StructTag('roles:"admin,user" enabled:"true" contextPath:"/api" unknown:"x"')]


class BadAge:
    at_foo: Annotated[AtFoo, StructTag('age:"old"')]


class WithGetMapping:
    get_mapping: Annotated[at.GetMapping, StructTag('value:"/path/to/api"')]


class WithPostMapping:
    post_mapping: Annotated[at.PostMapping, StructTag('value:"/path/to/api"')]


class StatusOK:
    response: Annotated[at.Response, StructTag('code:"200" description:"get agent state success"')]


class Responses:
    status_ok: StatusOK


class GetAgentState:
    get_mapping: Annotated[at.GetMapping, StructTag('value:"/"')]
    responses: Responses


class AtChain(Annotation):
    parent: Optional["AtChain"] = None


class HasChain:
    chain: Annotated[AtChain, StructTag('value:"x"')]


class OverriddenCode:
    at_baz: Annotated[AtBaz, StructTag('code:"201"')]


@dataclass(frozen=True)
class FrozenHolder:
    at_bar: Annotated[AtBar, StructTag('value:"bar"')] = None  # type: ignore[assignment]


@pytest.fixture
def foo() -> Foo:
    f = Foo()
    f.value = "my object value"
    return f


class TestGetFields:
    """Tests for get_fields()."""

    def test_marker_fields_in_order(self, foo: Foo) -> None:
        """Only marker fields are returned, in declaration order."""
        fields = get_fields(foo)
        assert [f.name for f in fields] == ["at_baz", "at_foo", "at_bar", "at_foo_bar", "at_foo_baz"]

    def test_index_is_position_in_flattened_list(self, foo: Foo) -> None:
        """Inherited plain fields come first in the flattened list."""
        assert [f.index for f in get_fields(foo)] == [2, 3, 4, 5, 6]

    def test_depth_first_through_markers(self) -> None:
        """Markers declared inside a marker follow it directly."""
        assert [f.name for f in get_fields(Outer())] == ["first", "nested", "inner", "last"]

    def test_owner_and_value(self, foo: Foo) -> None:
        """Fields of an instance point at it; unset markers have no value."""
        field = get_fields(foo)[0]
        assert field.owner is foo
        assert field.value is None

    @pytest.mark.parametrize("obj", [123, "text", None, [1, 2]])
    def test_non_struct_is_empty(self, obj: object) -> None:
        """Non-struct input yields an empty list, not an error."""
        assert get_fields(obj) == []


class TestContains:
    """Tests for contains() and contains_child()."""

    def test_contains_field_list(self, foo: Foo) -> None:
        """A field list contains exact marker types."""
        fields = get_fields(foo)
        assert contains(fields, AtFoo)
        assert contains(fields, AtFoo())
        assert not contains(fields, MyObj)

    def test_contains_object(self, foo: Foo) -> None:
        """An object contains the markers it declares directly."""
        assert contains(foo, AtFoo)
        assert not contains(Outer(), AtBar)

    def test_marker_contains_its_base(self) -> None:
        """A marker contains the marker it directly specializes."""
        assert contains(AtFoo(), Annotation)
        assert contains(AtFooBar(), AtFoo)
        assert not contains(AtFooBar(), Annotation)

    def test_contains_non_struct(self) -> None:
        assert not contains(123, AtFoo)

    def test_contains_child_finds_specializations(self) -> None:
        """contains_child matches markers that specialize the queried one."""
        fields = get_fields(OnlySpecialized())
        assert not contains(fields, AtFoo)
        assert contains_child(fields, AtFoo)

    def test_contains_child_finds_nested_markers(self) -> None:
        """contains_child sees markers declared inside markers."""
        assert not contains(Outer(), AtBar)
        assert contains_child(Outer(), AtBar)

    def test_contains_child_on_class(self) -> None:
        """Classes can be queried without an instance."""
        assert contains_child(WithGetMapping, at.RequestMapping)
        assert not contains_child(WithGetMapping, at.Response)


class TestGetField:
    """Tests for get_field()."""

    def test_tag_literals_are_unmodified(self, foo: Foo) -> None:
        """The field exposes its raw tag literals."""
        field = get_field(foo, AtFoo)
        assert field is not None
        assert field.tag.lookup("value") == ("foo,option 1,option 2", True)
        assert field.tag.lookup("age") == ("18", True)

    def test_exact_type_only(self) -> None:
        """Specializations are not returned for the base marker."""
        assert get_field(OnlySpecialized(), AtFoo) is None

    def test_non_struct(self) -> None:
        assert get_field(123, AtFoo) is None

    def test_by_class(self) -> None:
        """A class can be queried; the field then has no value and no owner."""
        field = get_field(WithPostMapping, at.PostMapping)
        assert field is not None
        assert field.name == "post_mapping"
        assert field.value is None
        assert field.owner is None


class TestFind:
    """Tests for find()."""

    def test_single_occurrence(self, foo: Foo) -> None:
        assert len(find(foo, AtBaz)) == 1

    def test_specializations(self, foo: Foo) -> None:
        """Markers built on the queried one are occurrences of it too."""
        assert [f.name for f in find(foo, AtFoo)] == ["at_foo", "at_foo_bar", "at_foo_baz"]

    def test_mapping_specialization(self) -> None:
        found = find(WithGetMapping, at.RequestMapping)
        assert [f.name for f in found] == ["get_mapping"]
        assert found[0].type is at.GetMapping

    def test_inside_nested_structs(self) -> None:
        """find descends into nested non-marker classes."""
        found = find(GetAgentState, at.Response)
        assert len(found) == 1
        assert found[0].tag.get("code") == "200"

    def test_inside_markers(self) -> None:
        assert [f.name for f in find(Outer(), AtBar)] == ["inner"]

    def test_non_struct(self) -> None:
        assert find(None, AtFoo) == []


class TestInjectIntoFields:
    """Tests for inject_into_fields()."""

    def test_injects_all_annotations(self, foo: Foo) -> None:
        """Markers are created and populated from their tags."""
        inject_into_fields(foo)
        assert foo.at_foo.value == "foo"
        assert foo.at_foo.age == 18
        assert foo.at_bar.value == "bar"
        assert foo.at_foo_bar.value == "foobar"
        assert foo.at_foo_bar.age == 12
        assert foo.value == "my object value"

    def test_idempotent(self, foo: Foo) -> None:
        """A second injection keeps the same markers and values."""
        inject_into_fields(foo)
        marker = foo.at_foo
        inject_into_fields(foo)
        assert foo.at_foo is marker
        assert (foo.at_foo.value, foo.at_foo.age) == ("foo", 18)

    def test_nested_markers(self) -> None:
        """Markers inside markers are populated too."""
        outer = Outer()
        inject_into_fields(outer)
        assert outer.nested.value == "nested"
        assert outer.nested.inner.value == "inner"
        assert outer.last.value == ""

    def test_marker_attribute_tags(self, foo: Foo) -> None:
        """Marker attributes take the value tag of their own declaration."""
        inject_into_fields(foo)
        assert foo.at_baz.code == 200
        assert foo.at_foo_bar.code == 200
        assert foo.at_foo_baz.code == 400

    def test_field_tag_wins_over_attribute_tag(self) -> None:
        obj = OverriddenCode()
        inject_into_fields(obj)
        assert obj.at_baz.code == 201

    def test_self_referencing_marker(self) -> None:
        """A marker holding its own type is populated once, not endlessly."""
        obj = HasChain()
        inject_into_fields(obj)
        assert obj.chain.value == "x"
        assert obj.chain.parent is None

    def test_specialized_mapping(self) -> None:
        """Specializations keep their own defaults."""
        obj = WithGetMapping()
        inject_into_fields(obj)
        assert obj.get_mapping.value == "/path/to/api"
        assert obj.get_mapping.method == "GET"

    def test_options(self) -> None:
        """Lists take every segment, booleans parse, camelCase keys map to snake_case."""
        obj = WithOptions()
        inject_into_fields(obj)
        assert obj.options.roles == ["admin", "user"]
        assert obj.options.enabled is True
        assert obj.options.context_path == "/api"

    def test_bad_syntax(self) -> None:
        """A malformed tag stops injection with a syntax error."""
        with pytest.raises(TagSyntaxError) as exc_info:
            inject_into_fields(Bar())
        assert str(exc_info.value) == "bad syntax for struct tag pair"

    def test_conversion_failure(self) -> None:
        with pytest.raises(UnsupportedInjectionTypeError):
            inject_into_fields(BadAge())

    @pytest.mark.parametrize("obj", [None, 123, "text", Foo])
    def test_invalid_object(self, obj: object) -> None:
        """None, scalars and classes are rejected."""
        with pytest.raises(InvalidObjectError):
            inject_into_fields(obj)

    def test_frozen_object(self) -> None:
        with pytest.raises(InvalidObjectError):
            inject_into_fields(FrozenHolder())


class TestInjectIntoField:
    """Tests for inject_into_field()."""

    def test_single_field(self) -> None:
        obj = Foo()
        field = get_field(obj, AtBaz)
        assert field is not None
        inject_into_field(field)
        assert obj.at_baz.value == "baz"
        assert field.value is obj.at_baz

    def test_bad_syntax(self) -> None:
        field = get_field(Bar(), AtFoo)
        assert field is not None
        with pytest.raises(TagSyntaxError):
            inject_into_field(field)

    def test_class_field_can_not_be_set(self) -> None:
        """Fields found on a class have no owner to populate."""
        field = get_field(WithPostMapping, at.PostMapping)
        assert field is not None
        with pytest.raises(InvalidObjectError):
            inject_into_field(field)
