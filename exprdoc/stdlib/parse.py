"""Parsing functions."""

import json
import re

from exprdoc.errors import ExpressionError
from exprdoc.helpers import example, fails, function_doc, optional, param, returns
from exprdoc.registry import documented
from exprdoc.values import Value, kind_of

PREFER_SPECIFIC_PARSER = """
    Before reaching for a general-purpose parser, check whether a purpose-specific
    `parse_*` function already exists for your format.
"""


# ===================================================================
# parse_json
# ===================================================================


def _reject_constant(name: str) -> Value:
    raise ValueError(f"{name} is not valid JSON")


def _limit_depth(value: Value, depth: int, max_depth: int) -> Value:
    """Re-encode containers nested deeper than ``max_depth`` as JSON text."""
    if not isinstance(value, (dict, list)):
        return value
    if depth > max_depth:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, dict):
        return {k: _limit_depth(v, depth + 1, max_depth) for k, v in value.items()}
    return [_limit_depth(v, depth + 1, max_depth) for v in value]


@documented(
    function_doc(
        "parse_json",
        summary="Parse a JSON document.",
        category="parse",
        description="""
            Parses the `value` as JSON. Only JSON types are returned; the special float
            values `NaN` and `Infinity` are rejected.
        """,
        parameters=[
            param("value", "string", "The string representation of the JSON to parse."),
            optional(
                "max_depth",
                "integer",
                "Number of layers to parse for nested JSON documents. Deeper values "
                "are kept as JSON text. Must be between 1 and 128.",
            ),
        ],
        returns=returns("any", "The parsed JSON value."),
        failures=["`value` is not a valid JSON-formatted payload.", "`max_depth` is not between 1 and 128."],
        examples=[
            example("Parse JSON", r'parse_json!("{\"key\": \"val\"}")', {"key": "val"}),
            example(
                "Parse JSON with max_depth",
                r'parse_json!("{\"top_level\": {\"key\": \"value\"}}", max_depth: 1)',
                {"top_level": '{"key":"value"}'},
            ),
            example("Parse a JSON array", 'parse_json!("[1, 2.5, null]")', [1, 2.5, None]),
            example("Invalid JSON", 'parse_json!("{ invalid")', fails()),
        ],
        notices=[PREFER_SPECIFIC_PARSER],
    )
)
def parse_json(value: str, max_depth: int | None = None) -> Value:
    if max_depth is not None and not 1 <= max_depth <= 128:
        raise ExpressionError(f"max_depth value should be between 1 and 128, got {max_depth}")
    try:
        parsed = json.loads(value, parse_constant=_reject_constant)
    except ValueError as e:
        raise ExpressionError(f"unable to parse json: {e}") from e
    if max_depth is None:
        return parsed
    return _limit_depth(parsed, 1, max_depth)


# ===================================================================
# parse_regex_all
# ===================================================================


def capture_to_object(pattern: re.Pattern[str], match: re.Match[str], numeric_groups: bool) -> dict[str, Value]:
    captures: dict[str, Value] = dict(match.groupdict())
    if numeric_groups:
        captures["0"] = match.group(0)
        for i in range(1, pattern.groups + 1):
            captures[str(i)] = match.group(i)
    return captures


@documented(
    function_doc(
        "parse_regex_all",
        summary="Parse every regex match in a string.",
        category="parse",
        description="""
            Parses the `value` using the provided [Regex](https://en.wikipedia.org/wiki/Regular_expression) `pattern`.

            This function differs from the `parse_regex` function in that it returns _all_ matches, not just the first.
        """,
        parameters=[
            param("value", "any", "The string to search."),
            param("pattern", "regex", "The regular expression pattern to search against."),
            optional(
                "numeric_groups",
                "boolean",
                "If `true`, the index of each group in the regular expression is also "
                "captured. Index `0` contains the whole match.",
                default=False,
            ),
        ],
        returns=returns(
            "array<object>",
            "One object of captures per match.",
            "Matches return all capture groups corresponding to the leftmost matches in the text.",
            "Returns an empty array if nothing matches.",
        ),
        failures=["`value` is not a string."],
        examples=[
            example(
                "Parse using Regex (all matches)",
                r'''parse_regex_all!("first group and second group.", r'(?P<number>\w+) group', numeric_groups: true)''',
                [
                    {"number": "first", "0": "first group", "1": "first"},
                    {"number": "second", "0": "second group", "1": "second"},
                ],
            ),
            example(
                "Parse using Regex (simple match)",
                r'''parse_regex_all!("apples and carrots, peaches and peas", r'(?P<fruit>[\w\.]+) and (?P<veg>[\w]+)')''',
                [
                    {"fruit": "apples", "veg": "carrots"},
                    {"fruit": "peaches", "veg": "peas"},
                ],
            ),
            example(
                "Parse using Regex (all numeric groups)",
                r'''parse_regex_all!("apples and carrots, peaches and peas", r'(?P<fruit>[\w\.]+) and (?P<veg>[\w]+)', numeric_groups: true)''',
                [
                    {"fruit": "apples", "veg": "carrots", "0": "apples and carrots", "1": "apples", "2": "carrots"},
                    {"fruit": "peaches", "veg": "peas", "0": "peaches and peas", "1": "peaches", "2": "peas"},
                ],
            ),
            example("Not a string", r"parse_regex_all!(42, r'\d+')", fails()),
        ],
        notices=[
            PREFER_SPECIFIC_PARSER,
            """
            All values are returned as strings. We recommend manually coercing values to
            desired types as you see fit.
            """,
        ],
    )
)
def parse_regex_all(value: Value, pattern: re.Pattern[str], numeric_groups: bool = False) -> list[Value]:
    if not isinstance(value, str):
        raise ExpressionError(f"expected string, got {kind_of(value)}")
    return [capture_to_object(pattern, m, numeric_groups) for m in pattern.finditer(value)]
