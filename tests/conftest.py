"""Synthetic registries of one or two functions."""

import json
from collections.abc import Callable

import pytest

from exprdoc.errors import ExpressionError
from exprdoc.executor import ExampleExecutor
from exprdoc.helpers import example, fails, function_doc, param, returns
from exprdoc.lang import Runtime
from exprdoc.model import FunctionDoc
from exprdoc.registry import FunctionRegistry
from exprdoc.validate import FailureMatch, Validator


def _upcase(value: str) -> str:
    return value.upper()


def _parse_json(value: str) -> object:
    try:
        return json.loads(value)
    except ValueError as e:
        raise ExpressionError(f"unable to parse json: {e}") from e


@pytest.fixture
def upcase_doc() -> FunctionDoc:
    return function_doc(
        "upcase",
        summary="Upcase a string.",
        category="string",
        description="Returns `value` with every character uppercased.",
        parameters=[param("value", "string", "The string to upcase.")],
        returns=returns("string", "The upcased string."),
        examples=[example("Upcase", 'upcase("abc")', "ABC")],
    )


@pytest.fixture
def parse_json_doc() -> FunctionDoc:
    return function_doc(
        "parse_json",
        summary="Parse a JSON document.",
        category="parse",
        description="Parses `value` as JSON.",
        parameters=[param("value", "string", "The JSON text.")],
        returns=returns("any", "The parsed value."),
        failures=["input is not valid JSON"],
        examples=[example("Malformed JSON", 'parse_json!("{ invalid")', fails())],
    )


@pytest.fixture
def upcase_registry(upcase_doc: FunctionDoc) -> FunctionRegistry:
    registry = FunctionRegistry("test")
    registry.register("upcase", upcase_doc, _upcase)
    return registry


@pytest.fixture
def registry(upcase_doc: FunctionDoc, parse_json_doc: FunctionDoc) -> FunctionRegistry:
    registry = FunctionRegistry("test")
    registry.register("upcase", upcase_doc, _upcase)
    registry.register("parse_json", parse_json_doc, _parse_json)
    return registry


@pytest.fixture
def make_validator() -> Callable[..., Validator]:
    def make(
        registry: FunctionRegistry,
        *,
        timeout: float = 5.0,
        failure_match: FailureMatch = FailureMatch.KIND_AND_MESSAGE,
    ) -> Validator:
        executor = ExampleExecutor(Runtime(registry).evaluate, timeout=timeout)
        return Validator(executor, failure_match=failure_match)

    return make
