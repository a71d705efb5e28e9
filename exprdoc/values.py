"""Runtime values of the expression language.

Values are plain Python objects:

    null       None
    boolean    bool
    integer    int
    float      float
    string     str
    array      list
    object     dict (string keys)
    regex      re.Pattern
    timestamp  datetime.datetime

Only the first seven are JSON values and may appear in artifacts.
"""

from __future__ import annotations

import json
import math
import re
from datetime import datetime
from typing import Any

Value = Any

JSON_KINDS = frozenset(
    {"null", "boolean", "integer", "float", "string", "array", "object"}
)


def kind_of(value: Value) -> str:
    # bool before int: True is an int in Python but a boolean here
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, re.Pattern):
        return "regex"
    if isinstance(value, datetime):
        return "timestamp"
    raise TypeError(f"Not an expression value: {type(value).__name__}")


def values_equal(a: Value, b: Value) -> bool:
    """Value-level equality.

    Unlike ``==``, a boolean never equals an integer and an integer never
    equals a float. Object key order is not significant.
    """
    kind = kind_of(a)
    if kind != kind_of(b):
        return False
    match kind:
        case "array":
            return len(a) == len(b) and all(
                values_equal(x, y) for x, y in zip(a, b, strict=True)
            )
        case "object":
            return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
        case "regex":
            return a.pattern == b.pattern and a.flags == b.flags
        case _:
            return bool(a == b)


def is_json_value(value: Value) -> bool:
    """True when ``value`` can be written to an artifact without loss."""
    try:
        kind = kind_of(value)
    except TypeError:
        return False
    if kind not in JSON_KINDS:
        return False
    if kind == "float":
        return math.isfinite(value)
    if kind == "array":
        return all(is_json_value(v) for v in value)
    if kind == "object":
        return all(isinstance(k, str) and is_json_value(v) for k, v in value.items())
    return True


def _display_fallback(value: object) -> str:
    if isinstance(value, re.Pattern):
        return f"r'{value.pattern}'"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return repr(bytes(value))
    return f"<{type(value).__name__} {value!r}>"


def render_value(value: Value) -> str:
    """Single-line rendering used in diagnostics and reference pages.

    Values outside the expression language are shown as a quoted
    description instead of failing.
    """
    return json.dumps(value, ensure_ascii=False, default=_display_fallback)
