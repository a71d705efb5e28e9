"""Functions over the contents of arrays, objects and strings."""

from exprdoc.helpers import example, function_doc, param, returns
from exprdoc.registry import documented
from exprdoc.values import Value


@documented(
    function_doc(
        "keys",
        summary="Get the keys of an object.",
        category="enumerate",
        description="Returns the keys from the object passed into the function.",
        parameters=[param("value", "object", "The object to extract keys from.")],
        returns=returns(
            "array<string>",
            "The keys of `value`, in insertion order.",
            "Returns an array of all the keys.",
        ),
        examples=[
            example(
                "Get keys from the object",
                '''keys({
    "key1": "val1",
    "key2": "val2"
})''',
                ["key1", "key2"],
            ),
        ],
    )
)
def keys(value: dict[str, Value]) -> list[str]:
    return list(value.keys())


@documented(
    function_doc(
        "values",
        summary="Get the values of an object.",
        category="enumerate",
        description="Returns the values from the object passed into the function.",
        parameters=[param("value", "object", "The object to extract values from.")],
        returns=returns(
            "array",
            "The values of `value`, in insertion order.",
            "Returns an array of all the values.",
        ),
        examples=[
            example(
                "Get values from the object",
                'values({"key1": "val1", "key2": "val2"})',
                ["val1", "val2"],
            ),
            example(
                "Get values from a complex object",
                'values({"key1": "val1", "key2": [1, 2, 3], "key3": {"foo": "bar"}})',
                ["val1", [1, 2, 3], {"foo": "bar"}],
            ),
        ],
    )
)
def values(value: dict[str, Value]) -> list[Value]:
    return list(value.values())


@documented(
    function_doc(
        "length",
        summary="Get the length of a collection or string.",
        category="enumerate",
        description="""
            Returns the length of `value`.

            * If `value` is an array, returns the number of elements.
            * If `value` is an object, returns the number of top-level keys.
            * If `value` is a string, returns the number of characters.
        """,
        parameters=[param("value", "array | object | string", "The array, object or string.")],
        returns=returns("integer", "The length of `value`."),
        examples=[
            example(
                "Length (object)",
                'length({"portland": "Trail Blazers", "seattle": "Supersonics"})',
                2,
            ),
            example("Length (nested object)", 'length({"home": {"city": "Portland"}})', 1),
            example("Length (array)", 'length(["Trail Blazers", "Supersonics", "Grizzlies"])', 3),
            example("Length (string)", 'length("The Planet of the Apes Musical")', 30),
        ],
    )
)
def length(value: Value) -> int:
    return len(value)
