"""Documentation metadata for expression-language functions.

Every documented function supplies one FunctionDoc:

    FunctionDoc
      identifier                 stable name, unique in a registry
      summary                    one line
      description                full prose (the former "usage" text)
      category                   one of a fixed set of Category values
      parameters                 ordered; order is the positional call order
      returns                    type + description (+ rules)
      internal_failure_reasons   evaluation-time failures; non-empty => fallible
      examples                   executable proofs of behavior
      notices                    reader-facing warnings

All types are frozen. A FunctionDoc is built once, at registration, and
never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .result import Err, Ok, Result
from .typespec import TypeSpec
from .values import Value

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class Category(Enum):
    ARRAY = "array"
    CHECKSUM = "checksum"
    CODEC = "codec"
    COERCE = "coerce"
    CONVERT = "convert"
    CRYPTOGRAPHY = "cryptography"
    DEBUG = "debug"
    ENRICH = "enrich"
    ENUMERATE = "enumerate"
    EVENT = "event"
    IP = "ip"
    NUMBER = "number"
    OBJECT = "object"
    PARSE = "parse"
    PATH = "path"
    RANDOM = "random"
    STRING = "string"
    SYSTEM = "system"
    TIMESTAMP = "timestamp"
    TYPE = "type"


DEFAULT_CATEGORIES: frozenset[Category] = frozenset(Category)


# ---------------------------------------------------------------------------
# Parameters & return values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnumVariant:
    """One allowed value of an enum-restricted string parameter."""

    value: str
    description: str


@dataclass(frozen=True)
class Parameter:
    """A named parameter.

    ``default`` is only meaningful for optional parameters; ``None`` means
    the function falls back to its own behavior when the argument is
    omitted.
    """

    name: str
    type: TypeSpec
    description: str
    required: bool = True
    default: Value = None
    enum_variants: tuple[EnumVariant, ...] = ()


@dataclass(frozen=True)
class ReturnSpec:
    type: TypeSpec
    description: str
    rules: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Examples
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Failure:
    """A structured evaluation failure.

    An empty ``message`` in a *declared* failure means only the kind is
    compared.
    """

    kind: str
    message: str = ""


@dataclass(frozen=True)
class Example:
    """An expression paired with its declared outcome.

    ``expected`` is ``Ok(value)`` for a success or ``Err(Failure)`` for a
    failure, so exactly one of the two is always declared.
    """

    source: str
    expected: Ok[Value] | Err[Failure]
    title: str | None = None
    notes: str | None = None
    input: Value = None
    requires_host: bool = False

    @property
    def expects_failure(self) -> bool:
        return isinstance(self.expected, Err)


# ---------------------------------------------------------------------------
# FunctionDoc
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FunctionDoc:
    identifier: str
    summary: str
    description: str
    category: Category
    parameters: tuple[Parameter, ...]
    returns: ReturnSpec
    internal_failure_reasons: tuple[str, ...] = ()
    examples: tuple[Example, ...] = ()
    notices: tuple[str, ...] = ()

    @property
    def fallible(self) -> bool:
        return len(self.internal_failure_reasons) > 0

    def get_parameter(self, name: str) -> Parameter | None:
        for p in self.parameters:
            if p.name == name:
                return p
        return None

    @property
    def required_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.required)


# ---------------------------------------------------------------------------
# Completeness
# ---------------------------------------------------------------------------


def _blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def is_complete(doc: FunctionDoc) -> Result[FunctionDoc, frozenset[str]]:
    """Check that every required field is present and non-empty.

    Returns ``Ok(doc)`` or ``Err(missing_fields)``; nested fields are named
    with their path, e.g. ``parameters[1].description``.
    """
    missing: set[str] = set()

    for name in ("identifier", "summary", "description"):
        if _blank(getattr(doc, name)):
            missing.add(name)

    if not isinstance(doc.category, Category):
        missing.add("category")

    match doc.returns:
        case ReturnSpec(type=t, description=d):
            if t is None:
                missing.add("returns.type")
            if _blank(d):
                missing.add("returns.description")
        case _:
            missing.add("returns")

    for i, p in enumerate(doc.parameters):
        if _blank(p.name):
            missing.add(f"parameters[{i}].name")
        if p.type is None:
            missing.add(f"parameters[{i}].type")
        if _blank(p.description):
            missing.add(f"parameters[{i}].description")

    for i, ex in enumerate(doc.examples):
        if _blank(ex.source):
            missing.add(f"examples[{i}].source")
        if not isinstance(ex.expected, (Ok, Err)):
            missing.add(f"examples[{i}].expected")

    for i, reason in enumerate(doc.internal_failure_reasons):
        if _blank(reason):
            missing.add(f"internal_failure_reasons[{i}]")

    if missing:
        return Err(frozenset(missing))
    return Ok(doc)
