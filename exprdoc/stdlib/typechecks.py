"""Type-checking functions."""

from exprdoc.errors import ExpressionError
from exprdoc.helpers import example, fails, function_doc, param, returns
from exprdoc.registry import documented
from exprdoc.values import Value, kind_of


@documented(
    function_doc(
        "bool",
        summary="Assert that a value is a Boolean.",
        category="type",
        description="""
            Returns `value` if it is a Boolean, otherwise returns an error. This enables
            the type checker to guarantee that the returned value is a Boolean and can be
            used in any function that expects a Boolean.
        """,
        parameters=[param("value", "any", "The value to check if it is a Boolean.")],
        returns=returns(
            "boolean",
            "`value`, unchanged.",
            "Returns `value` if it's a Boolean.",
            "Raises an error if not a Boolean.",
        ),
        failures=["`value` is not a Boolean."],
        examples=[
            example("Valid Boolean", "bool!(false)", False),
            example(
                "Invalid Boolean",
                "bool!(42)",
                fails(message='function call error for "bool" at (0:9): expected boolean, got integer'),
            ),
            example(
                "Valid Boolean from path",
                '. = { "value": true }\nbool!(.value)',
                True,
            ),
            example("Boolean from the event", "bool!(.enabled)", True, input={"enabled": True}),
        ],
    )
)
def boolean(value: Value) -> bool:
    if isinstance(value, bool):
        return value
    raise ExpressionError(f"expected boolean, got {kind_of(value)}")


@documented(
    function_doc(
        "is_integer",
        summary="Check if a value is an integer.",
        category="type",
        description="Check if the `value`'s type is an integer.",
        parameters=[param("value", "any", "The value to check if it is an integer.")],
        returns=returns(
            "boolean",
            "Whether `value` is an integer.",
            "Returns `true` if `value` is an integer.",
            "Returns `false` if `value` is anything else.",
        ),
        examples=[
            example("Valid integer", "is_integer(1)", True),
            example("Non-matching type", 'is_integer("a string")', False),
            example("Null", "is_integer(null)", False),
            example("Floats are not integers", "is_integer(1.0)", False),
        ],
    )
)
def is_integer(value: Value) -> bool:
    return kind_of(value) == "integer"


@documented(
    function_doc(
        "is_string",
        summary="Check if a value is a string.",
        category="type",
        description="Check if the `value`'s type is a string.",
        parameters=[param("value", "any", "The value to check if it is a string.")],
        returns=returns(
            "boolean",
            "Whether `value` is a string.",
            "Returns `true` if `value` is a string.",
            "Returns `false` if `value` is anything else.",
        ),
        examples=[
            example("Valid string", 'is_string("a string")', True),
            example("Non-matching type", "is_string([1, 2, 3])", False),
        ],
    )
)
def is_string(value: Value) -> bool:
    return kind_of(value) == "string"
