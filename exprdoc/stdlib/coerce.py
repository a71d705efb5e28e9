"""Coercion functions."""

import math

from exprdoc.errors import ExpressionError
from exprdoc.helpers import example, fails, function_doc, param, returns
from exprdoc.registry import documented
from exprdoc.values import Value, kind_of


@documented(
    function_doc(
        "to_int",
        summary="Coerce a value to an integer.",
        category="coerce",
        description="Coerces the `value` into an integer.",
        parameters=[param("value", "integer | float | boolean | string | timestamp | null", "The value to convert to an integer.")],
        returns=returns(
            "integer",
            "The integer value of `value`.",
            "If `value` is an integer, it is returned unchanged.",
            "If `value` is a float, it is truncated toward zero.",
            "If `value` is a string, it must be the string representation of an integer or else an error is raised.",
            "If `value` is a Boolean, `0` is returned for `false` and `1` is returned for `true`.",
            "If `value` is a timestamp, a Unix timestamp (in seconds) is returned.",
            "If `value` is null, `0` is returned.",
        ),
        failures=[
            "`value` is a string but the text is not an integer.",
            "`value` is a float that is not finite.",
        ],
        examples=[
            example("Coerce to an int (string)", 'to_int!("2")', 2),
            example("Coerce to an int (float)", "to_int!(5.6)", 5),
            example("Coerce to an int (negative float)", "to_int!(-5.6)", -5),
            example("Coerce to an int (boolean)", "to_int!(true)", 1),
            example("Coerce to an int (null)", "to_int!(null)", 0),
            example("Invalid string", 'to_int!("hi")', fails()),
        ],
    )
)
def to_int(value: Value) -> int:
    match kind_of(value):
        case "integer":
            return value
        case "boolean":
            return 1 if value else 0
        case "null":
            return 0
        case "float":
            if not math.isfinite(value):
                raise ExpressionError(f"cannot convert {value} to integer")
            return int(value)
        case "timestamp":
            return int(value.timestamp())
        case "string":
            try:
                return int(value.strip())
            except ValueError:
                raise ExpressionError(f"invalid integer {value!r}") from None
    raise ExpressionError(f"cannot convert {kind_of(value)} to integer")
