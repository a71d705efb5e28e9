"""The functions this repository documents.

Registration is explicit: ``build_registry`` lists every function, and
its order is the order of the generated artifacts.
"""

from exprdoc.registry import DocumentedCallable, FunctionRegistry

from .codec import decode_base64, encode_base64
from .coerce import to_int
from .enumeration import keys, length, values
from .parse import parse_json, parse_regex_all
from .strings import downcase, snakecase, strip_whitespace, upcase
from .typechecks import boolean, is_integer, is_string

REPOSITORY = "stdlib"

ALL_FUNCTIONS: tuple[DocumentedCallable, ...] = (
    # string
    upcase,
    downcase,
    snakecase,
    strip_whitespace,
    # type
    boolean,
    is_integer,
    is_string,
    # enumerate
    keys,
    values,
    length,
    # parse
    parse_json,
    parse_regex_all,
    # codec
    encode_base64,
    decode_base64,
    # coerce
    to_int,
)


def build_registry(name: str = REPOSITORY) -> FunctionRegistry:
    registry = FunctionRegistry(name)
    for fn in ALL_FUNCTIONS:
        registry.register_function(fn)
    return registry
