from dataclasses import replace

import pytest

from exprdoc.helpers import example, fails, function_doc, optional, param, returns
from exprdoc.model import Category, Failure, FunctionDoc, Parameter, is_complete
from exprdoc.result import Err, Ok
from exprdoc.typespec import parse_type


def test_complete_doc(upcase_doc: FunctionDoc) -> None:
    match is_complete(upcase_doc):
        case Ok(doc):
            assert doc is upcase_doc
        case Err(missing):
            pytest.fail(f"unexpected missing fields: {missing}")


def test_missing_fields_are_named_by_path(upcase_doc: FunctionDoc) -> None:
    doc = replace(
        upcase_doc,
        summary="",
        description="   ",
        parameters=(Parameter("value", parse_type("string"), ""),),
        internal_failure_reasons=("",),
    )
    match is_complete(doc):
        case Err(missing):
            assert missing == {
                "summary",
                "description",
                "parameters[0].description",
                "internal_failure_reasons[0]",
            }
        case Ok(_):
            pytest.fail("incomplete doc reported as complete")


def test_fallible_follows_failure_reasons(upcase_doc: FunctionDoc, parse_json_doc: FunctionDoc) -> None:
    assert not upcase_doc.fallible
    assert parse_json_doc.fallible


def test_get_parameter_and_required() -> None:
    doc = function_doc(
        "encode",
        summary="Encode.",
        category=Category.CODEC,
        description="Encodes.",
        parameters=[
            param("value", "string", "The value."),
            optional("padding", "boolean", "Pad output.", default=True),
        ],
        returns=returns("string", "Encoded text."),
    )
    padding = doc.get_parameter("padding")
    assert padding is not None and padding.default is True and not padding.required
    assert doc.get_parameter("nope") is None
    assert [p.name for p in doc.required_parameters] == ["value"]


class TestHelpers:
    def test_usage_is_an_alias_of_description(self) -> None:
        doc = function_doc(
            "f", summary="S.", category="string", usage="Text.", returns=returns("string", "R.")
        )
        assert doc.description == "Text."

    def test_usage_and_description_must_agree(self) -> None:
        with pytest.raises(ValueError, match="alias"):
            function_doc(
                "f",
                summary="S.",
                category="string",
                description="One.",
                usage="Two.",
                returns=returns("string", "R."),
            )

    def test_description_is_dedented(self) -> None:
        doc = function_doc(
            "f",
            summary="S.",
            category="string",
            description="""
                First line.
                  Indented.
            """,
            returns=returns("string", "R."),
        )
        assert doc.description == "First line.\n  Indented."

    def test_unknown_category_string(self) -> None:
        with pytest.raises(ValueError):
            function_doc("f", summary="S.", category="strings", description="D.", returns=returns("string", "R."))

    def test_example_wraps_result(self) -> None:
        ok = example(None, 'f("a")', "A")
        err = example("Failing", 'f!("a")', fails("function_call", "boom"))
        assert ok.expected == Ok("A") and not ok.expects_failure
        assert err.expected == Err(Failure("function_call", "boom")) and err.expects_failure

    def test_null_success_value(self) -> None:
        assert example(None, "f()", None).expected == Ok(None)

    def test_enum_variants(self) -> None:
        p = optional("charset", "string", "Charset.", default="standard", enum=[("standard", "Std."), ("url_safe", "URL.")])
        assert [v.value for v in p.enum_variants] == ["standard", "url_safe"]
