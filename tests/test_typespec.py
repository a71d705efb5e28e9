import re
from datetime import datetime, timezone

import pytest

from exprdoc.model import Failure
from exprdoc.result import Err, Ok
from exprdoc.typespec import (
    ArrayOf,
    ObjectOf,
    OneOf,
    Primitive,
    TypeSpecError,
    accepts,
    parse_type,
    render_type,
)
from exprdoc.validate import describe_result
from exprdoc.values import is_json_value, kind_of, render_value, values_equal


def test_parse_primitive() -> None:
    assert parse_type("string") == Primitive("string")


def test_parse_nested() -> None:
    spec = parse_type("array<object<integer | null>>")
    assert spec == ArrayOf(ObjectOf(OneOf((Primitive("integer"), Primitive("null")))))


def test_render_is_canonical() -> None:
    assert render_type(parse_type("string|integer")) == "string | integer"
    assert render_type(parse_type("  array < string >")) == "array<string>"
    assert render_type(parse_type("array<object<integer | null>>")) == "array<object<integer | null>>"


def test_union_members_deduplicated_in_order() -> None:
    assert render_type(parse_type("string | integer | string")) == "string | integer"
    assert parse_type("string | string") == Primitive("string")


@pytest.mark.parametrize("text", ["", "   ", "str", "array<string", "string |", "string integer", "array<>"])
def test_invalid_type_specs(text: str) -> None:
    with pytest.raises(TypeSpecError):
        parse_type(text)


def test_accepts() -> None:
    assert accepts(parse_type("integer"), 3)
    assert not accepts(parse_type("integer"), True)
    assert not accepts(parse_type("float"), 1)
    assert accepts(parse_type("array<string>"), ["a", "b"])
    assert not accepts(parse_type("array<string>"), ["a", 1])
    assert accepts(parse_type("object<integer>"), {"a": 1})
    assert not accepts(parse_type("object<integer>"), {"a": "1"})
    assert accepts(parse_type("string | null"), None)
    assert accepts(parse_type("regex"), re.compile("a+"))
    assert accepts(parse_type("any"), {"nested": [1, None]})
    assert not accepts(parse_type("integer"), object())


def test_kind_of_distinguishes_booleans() -> None:
    assert kind_of(True) == "boolean"
    assert kind_of(1) == "integer"
    assert kind_of(1.0) == "float"
    with pytest.raises(TypeError):
        kind_of(object())


def test_values_equal_is_strict_about_kinds() -> None:
    assert not values_equal(True, 1)
    assert not values_equal(1, 1.0)
    assert not values_equal([1], [True])
    assert values_equal({"a": 1, "b": [2, {"c": None}]}, {"b": [2, {"c": None}], "a": 1})
    assert not values_equal({"a": 1}, {"a": 1, "b": 2})


def test_is_json_value() -> None:
    assert is_json_value({"a": [1, 2.5, None, "x", True]})
    assert not is_json_value(float("nan"))
    assert not is_json_value(re.compile("a"))
    assert not is_json_value({1: "non-string key"})


class TestRenderValue:
    def test_json_values(self) -> None:
        assert render_value({"a": [1, None, "é"]}) == '{"a": [1, null, "é"]}'

    def test_language_values(self) -> None:
        assert render_value(re.compile(r"\d+")) == '"r\'\\\\d+\'"'
        assert render_value(datetime(2020, 1, 1, tzinfo=timezone.utc)) == '"2020-01-01T00:00:00+00:00"'

    def test_foreign_values_never_raise(self) -> None:
        assert render_value(b"ab") == '"b\'ab\'"'
        assert render_value({1, 2}).startswith('"<set ')
        assert describe_result(Ok([b"x"])) == '["b\'x\'"]'
        assert describe_result(Err(Failure("parse", ""))) == "error[parse]"
