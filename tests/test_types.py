"""Tests for type descriptor resolution and pydantic-backed coercion."""

from datetime import date
from decimal import Decimal
from typing import Annotated

import pytest
from pydantic import Field, ValidationError

from expectant import types
from expectant.errors import ConfigurationError, InvalidTypeDescriptor, UnknownTypeTag


class Customer:
    pass


class TestResolve:
    def test_none_resolves_to_any(self):
        assert types.resolve(None) is types.Any

    @pytest.mark.parametrize(
        "tag, expected",
        [
            ("string", types.String),
            ("str", types.String),
            ("integer", types.Integer),
            ("int", types.Integer),
            ("float", types.Float),
            ("decimal", types.Decimal),
            ("boolean", types.Bool),
            ("bool", types.Bool),
            ("date", types.Date),
            ("datetime", types.DateTime),
            ("time", types.Time),
            ("array", types.Array),
            ("hash", types.Hash),
            ("symbol", types.Symbol),
            ("sym", types.Symbol),
            ("any", types.Any),
            ("nil", types.Nil),
        ],
    )
    def test_tags(self, tag, expected):
        assert types.resolve(tag) is expected

    def test_tags_are_case_insensitive(self):
        assert types.resolve("Integer") is types.Integer

    def test_unknown_tag(self):
        with pytest.raises(UnknownTypeTag, match="Unknown type symbol"):
            types.resolve("unknown_type")

    def test_unknown_tag_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            types.resolve_tag("invalid")

    def test_field_type_returned_as_is(self):
        constrained = types.Strict.String.constrained(min_length=5)
        assert types.resolve(constrained) is constrained

    @pytest.mark.parametrize("descriptor", [123, 1.5, {}, object()])
    def test_invalid_descriptors(self, descriptor):
        with pytest.raises(InvalidTypeDescriptor, match="Invalid type definition"):
            types.resolve(descriptor)

    @pytest.mark.parametrize(
        "descriptor",
        [["array"], ["array", "string", "int"], ["hash", "string"], ("list",), [1, 2]],
    )
    def test_malformed_array_descriptors(self, descriptor):
        with pytest.raises(InvalidTypeDescriptor, match="Invalid array type definition"):
            types.resolve(descriptor)

    def test_nested_array_resolves_element_type(self):
        tags = types.resolve(["array", "string"])
        assert tags.coerce(["ruby", "python"]) == ["ruby", "python"]
        with pytest.raises(ValidationError):
            tags.coerce(["ruby", 123])

    def test_array_of_arrays(self):
        matrix = types.resolve(("array", ["array", "int"]))
        assert matrix.coerce([["1", 2], [3]]) == [[1, 2], [3]]

    def test_array_element_unknown_tag_propagates(self):
        with pytest.raises(UnknownTypeTag):
            types.resolve(["array", "nope"])

    def test_typing_alias_is_wrapped(self):
        assert types.resolve(list[int]).coerce(["1", "2"]) == [1, 2]
        bounded = types.resolve(Annotated[int, Field(ge=1)])
        with pytest.raises(ValidationError):
            bounded.coerce(0)


class TestInstanceOf:
    def test_class_resolves_to_instance_check(self):
        string_only = types.resolve(str)
        assert string_only.coerce("test") == "test"
        with pytest.raises(ValidationError):
            string_only.coerce(123)

    def test_custom_class(self):
        customer = Customer()
        assert types.resolve(Customer).coerce(customer) is customer
        with pytest.raises(ValidationError):
            types.resolve(Customer).coerce({"name": "not a customer"})

    def test_array_of_custom_instances(self):
        customers = types.array_of(types.instance_of(Customer))
        assert len(customers.coerce([Customer(), Customer()])) == 2
        with pytest.raises(ValidationError):
            customers.coerce([Customer(), "x"])


class TestCoercion:
    def test_lax_coercion_from_strings(self):
        assert types.Integer.coerce("123") == 123
        assert types.Float.coerce("123.45") == 123.45
        assert types.Decimal.coerce("1.50") == Decimal("1.50")
        assert types.Bool.coerce("true") is True
        assert types.Date.coerce("1994-01-01") == date(1994, 1, 1)

    def test_rejects_unparseable(self):
        with pytest.raises(ValidationError):
            types.Integer.coerce("not an integer")

    def test_none_rejected_unless_optional(self):
        with pytest.raises(ValidationError):
            types.Bool.coerce(None)
        assert types.Bool.as_optional().coerce(None) is None

    def test_strict_types_do_not_coerce(self):
        with pytest.raises(ValidationError):
            types.Strict.Integer.coerce("42")
        with pytest.raises(ValidationError):
            types.Symbol.coerce(1)
        assert types.Strict.Integer.coerce(42) == 42

    def test_any_passes_through(self):
        marker = object()
        assert types.Any.coerce(marker) is marker


class TestBuilders:
    def test_builders_do_not_mutate_the_original(self):
        optional = types.Integer.as_optional()
        defaulted = types.Integer.with_default(5)
        bounded = types.Integer.constrained(ge=1, le=100)

        assert optional.is_optional and not types.Integer.is_optional
        assert defaulted.has_default and not types.Integer.has_default
        assert types.Integer.coerce(200) == 200
        with pytest.raises(ValidationError):
            bounded.coerce(200)

    def test_flags_survive_constraining(self):
        bounded = types.String.with_default("draft").as_optional().constrained(min_length=3)
        assert bounded.has_default
        assert bounded.is_optional
        assert bounded.coerce(None) is None
        with pytest.raises(ValidationError):
            bounded.coerce("ab")

    def test_default_factory_called_each_time(self):
        today = types.Date.with_default(date.today)
        assert today.default_value() == date.today()

    def test_immediate_default_is_copied(self):
        tags = types.Array.with_default(["a"])
        first = tags.default_value()
        first.append("b")
        assert tags.default_value() == ["a"]

    def test_default_value_without_default(self):
        with pytest.raises(LookupError):
            types.String.default_value()

    def test_repr_lists_flags(self):
        assert repr(types.String.with_default("x").as_optional()) == "<FieldType string (optional, default)>"
