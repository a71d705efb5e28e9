import threading
from collections.abc import Callable
from dataclasses import replace

import pytest

from exprdoc.helpers import example, fails, function_doc, optional, param, returns
from exprdoc.model import FunctionDoc
from exprdoc.registry import FunctionRegistry, RegistryEntry
from exprdoc.validate import FailureMatch, Reason, Severity, Validator, validate_all

MakeValidator = Callable[..., Validator]


def _entry(registry: FunctionRegistry, identifier: str) -> RegistryEntry:
    entry = registry.get(identifier)
    assert entry is not None
    return entry


def _with_examples(registry: FunctionRegistry, identifier: str, *examples) -> RegistryEntry:  # type: ignore[no-untyped-def]
    entry = _entry(registry, identifier)
    return replace(entry, doc=replace(entry.doc, examples=tuple(examples)))


def _checks(report) -> set[str]:  # type: ignore[no-untyped-def]
    return {i.check for i in report.issues}


class TestScenarios:
    def test_upcase_passes(self, upcase_registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        report = make_validator(upcase_registry).validate(_entry(upcase_registry, "upcase"))
        assert report.identifier == "upcase"
        assert report.example_failures == ()
        assert report.missing_fields == frozenset()
        assert report.issues == ()
        assert report.passed(strict=True)

    def test_parse_json_declared_failure_matches_on_kind(
        self, registry: FunctionRegistry, make_validator: MakeValidator
    ) -> None:
        report = make_validator(registry).validate(_entry(registry, "parse_json"))
        assert report.example_failures == ()
        assert report.passed(strict=True)


class TestExamples:
    def test_value_mismatch(self, upcase_registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        entry = _with_examples(upcase_registry, "upcase", example(None, 'upcase("abc")', "abc"))
        report = make_validator(upcase_registry).validate(entry)
        (failure,) = report.example_failures
        assert failure.example_index == 0
        assert failure.reason == Reason.MISMATCH
        assert failure.expected == '"abc"'
        assert failure.actual == '"ABC"'
        assert not report.passed()

    def test_expected_failure_but_succeeded(
        self, registry: FunctionRegistry, make_validator: MakeValidator
    ) -> None:
        entry = _with_examples(registry, "parse_json", example(None, 'parse_json!("{}")', fails()))
        (failure,) = make_validator(registry).validate(entry).example_failures
        assert failure.reason == Reason.MISMATCH
        assert failure.actual == "{}"
        assert failure.expected == "error[function_call]"

    def test_failure_message_matching(self, registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        entry = _with_examples(
            registry,
            "parse_json",
            example(None, 'parse_json!("{ invalid")', fails("function_call", "some other message")),
        )
        strict_match = make_validator(registry).validate(entry)
        assert [f.reason for f in strict_match.example_failures] == [Reason.MISMATCH]

        kind_only = make_validator(registry, failure_match=FailureMatch.KIND).validate(entry)
        assert kind_only.example_failures == ()

    def test_failure_kind_mismatch(self, registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        entry = _with_examples(registry, "parse_json", example(None, 'parse_json!("{ invalid")', fails("timeout")))
        report = make_validator(registry, failure_match=FailureMatch.KIND).validate(entry)
        assert [f.reason for f in report.example_failures] == [Reason.MISMATCH]

    def test_did_not_parse(self, upcase_registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        entry = _with_examples(
            upcase_registry,
            "upcase",
            example(None, 'upcase("abc")', "ABC"),
            example(None, 'upcase("abc"', "ABC"),
        )
        report = make_validator(upcase_registry).validate(entry)
        (failure,) = report.example_failures
        assert failure.example_index == 1
        assert failure.reason == Reason.DID_NOT_PARSE

    def test_boolean_never_equals_integer(self, make_validator: MakeValidator) -> None:
        doc = function_doc(
            "is_set",
            summary="Always true.",
            category="type",
            description="Returns true.",
            returns=returns("boolean | integer", "true"),
            examples=[example(None, "is_set()", 1)],
        )
        registry = FunctionRegistry("test")
        registry.register("is_set", doc, lambda: True)
        (failure,) = make_validator(registry).validate(_entry(registry, "is_set")).example_failures
        assert failure.reason == Reason.MISMATCH

    def test_timeout(self, upcase_doc: FunctionDoc, make_validator: MakeValidator) -> None:
        release = threading.Event()

        def slow(value: str) -> str:
            release.wait(10)
            return value.upper()

        registry = FunctionRegistry("test")
        registry.register("upcase", upcase_doc, slow)
        try:
            report = make_validator(registry, timeout=0.05).validate(_entry(registry, "upcase"))
        finally:
            release.set()
        assert [f.reason for f in report.example_failures] == [Reason.TIMED_OUT]

    def test_skipped_example_is_a_warning(
        self, upcase_registry: FunctionRegistry, make_validator: MakeValidator
    ) -> None:
        entry = _with_examples(
            upcase_registry, "upcase", example(None, "upcase(.host)", "HOST", requires_host=True)
        )
        report = make_validator(upcase_registry).validate(entry)
        assert report.example_failures == ()
        assert [(i.check, i.severity, i.path) for i in report.issues] == [
            ("example_skipped", Severity.WARNING, "examples[0]")
        ]
        assert report.passed()
        assert not report.passed(strict=True)

    def test_no_examples_is_a_warning(self, upcase_registry: FunctionRegistry, make_validator: MakeValidator) -> None:
        report = make_validator(upcase_registry).validate(_with_examples(upcase_registry, "upcase"))
        assert _checks(report) == {"no_examples"}
        assert report.warnings and not report.errors
        assert report.passed()
        assert not report.passed(strict=True)

    def test_example_should_call_the_function(
        self, upcase_registry: FunctionRegistry, make_validator: MakeValidator
    ) -> None:
        entry = _with_examples(upcase_registry, "upcase", example(None, '"ABC"', "ABC"))
        report = make_validator(upcase_registry).validate(entry)
        assert _checks(report) == {"example_calls_function"}
        assert report.passed()


class TestMetadata:
    def _validate(self, doc: FunctionDoc, make_validator: MakeValidator):  # type: ignore[no-untyped-def]
        registry = FunctionRegistry("test")
        registry.register(doc.identifier, doc, lambda **kwargs: "x")
        return make_validator(registry).validate(_entry(registry, doc.identifier))

    def _doc(self, **overrides) -> FunctionDoc:  # type: ignore[no-untyped-def]
        fields = dict(
            summary="Summary.",
            category="string",
            description="Description.",
            parameters=[param("value", "string", "The value.")],
            returns=returns("string", "A string."),
            examples=[example(None, 'f("a")', "x")],
        )
        fields.update(overrides)
        return function_doc("f", **fields)

    def test_clean_doc(self, make_validator: MakeValidator) -> None:
        assert self._validate(self._doc(), make_validator).issues == ()

    def test_summary_single_line(self, make_validator: MakeValidator) -> None:
        report = self._validate(self._doc(summary="Two\nlines."), make_validator)
        assert _checks(report) == {"summary_single_line"}

    def test_parameter_checks(self, make_validator: MakeValidator) -> None:
        doc = self._doc(
            parameters=[
                optional("mode", "string", "Mode.", default=3, enum=[("a", "A."), ("a", "Again.")]),
                param("value", "string", "The value."),
                param("value", "string", "Again."),
            ],
        )
        report = self._validate(doc, make_validator)
        assert _checks(report) == {
            "default_type",
            "enum_values_unique",
            "enum_default",
            "parameter_order",
            "parameter_names_unique",
        }
        assert not report.passed()

    def test_enum_on_array_parameter(self, make_validator: MakeValidator) -> None:
        doc = self._doc(
            parameters=[
                param("value", "string", "The value."),
                optional("flags", "array<string>", "Flags.", default=["a"], enum=[("a", "A."), ("b", "B.")]),
            ],
        )
        assert self._validate(doc, make_validator).issues == ()

    def test_failure_reasons_distinct(self, make_validator: MakeValidator) -> None:
        doc = self._doc(failures=["bad input", "bad input"])
        assert "failure_reasons_distinct" in _checks(self._validate(doc, make_validator))

    def test_failure_example_requires_failure_reasons(self, make_validator: MakeValidator) -> None:
        doc = self._doc(examples=[example(None, 'f!("a")', fails())])
        report = self._validate(doc, make_validator)
        assert "failure_undeclared" in _checks(report)

    def test_expected_value_must_match_return_type(self, make_validator: MakeValidator) -> None:
        doc = self._doc(examples=[example(None, 'f("a")', 1)])
        report = self._validate(doc, make_validator)
        assert "example_return_type" in _checks(report)


def test_validate_all_keeps_registration_order(registry: FunctionRegistry, make_validator: MakeValidator) -> None:
    reports = validate_all(registry, make_validator(registry), workers=4)
    assert [r.identifier for r in reports] == ["upcase", "parse_json"]
    assert all(r.passed() for r in reports)


def test_validate_all_empty_registry(make_validator: MakeValidator) -> None:
    registry = FunctionRegistry("empty")
    assert validate_all(registry, make_validator(registry)) == ()


@pytest.mark.parametrize("workers", [None, 1])
def test_validate_all_workers(registry: FunctionRegistry, make_validator: MakeValidator, workers: int | None) -> None:
    assert len(validate_all(registry, make_validator(registry), workers=workers)) == 2
