"""Builder helpers for writing function docs.

These are the API function authors use. Type specs are given as strings
and parsed immediately, so a typo fails at import time rather than when
docs are generated.
"""

from __future__ import annotations

import textwrap
from collections.abc import Iterable

from exprdoc.model import (
    Category,
    EnumVariant,
    Example,
    Failure,
    FunctionDoc,
    Parameter,
    ReturnSpec,
)
from exprdoc.result import Err, Ok
from exprdoc.typespec import TypeSpec, parse_type
from exprdoc.values import Value


def _prose(text: str | None) -> str:
    return textwrap.dedent(text).strip() if text else ""


def _type(spec: str | TypeSpec) -> TypeSpec:
    return parse_type(spec) if isinstance(spec, str) else spec


def param(name: str, type: str | TypeSpec, description: str) -> Parameter:
    """A required parameter."""
    return Parameter(name=name, type=_type(type), description=description)


def optional(
    name: str,
    type: str | TypeSpec,
    description: str,
    *,
    default: Value = None,
    enum: Iterable[tuple[str, str]] = (),
) -> Parameter:
    """An optional parameter. ``enum`` is a list of ``(value, description)``."""
    return Parameter(
        name=name,
        type=_type(type),
        description=description,
        required=False,
        default=default,
        enum_variants=tuple(EnumVariant(v, d) for v, d in enum),
    )


def returns(type: str | TypeSpec, description: str, *rules: str) -> ReturnSpec:
    return ReturnSpec(type=_type(type), description=description, rules=tuple(rules))


def fails(kind: str = "function_call", message: str = "") -> Err[Failure]:
    """Declare that an example is expected to fail."""
    return Err(Failure(kind=kind, message=message))


def example(
    title: str | None,
    source: str,
    result: Value | Err[Failure],
    *,
    notes: str | None = None,
    input: Value = None,
    requires_host: bool = False,
) -> Example:
    """An example; ``result`` is the success value or a ``fails(...)``."""
    expected = result if isinstance(result, Err) else Ok(result)
    return Example(
        source=source,
        expected=expected,
        title=title,
        notes=notes,
        input=input,
        requires_host=requires_host,
    )


def function_doc(
    identifier: str,
    *,
    summary: str,
    category: Category | str,
    returns: ReturnSpec,
    description: str | None = None,
    usage: str | None = None,
    parameters: Iterable[Parameter] = (),
    failures: Iterable[str] = (),
    examples: Iterable[Example] = (),
    notices: Iterable[str] = (),
) -> FunctionDoc:
    """Build a FunctionDoc.

    ``usage`` is accepted as an alias of ``description`` for docs ported
    from the older two-field layout. Passing both with different text is an
    error; there is only one description.
    """
    if description is not None and usage is not None and description != usage:
        raise ValueError(
            f"Function '{identifier}': 'usage' is an alias of 'description'; pass one of them"
        )
    text = description if description is not None else usage
    # Descriptions are usually triple-quoted and indented with the code.
    return FunctionDoc(
        identifier=identifier,
        summary=summary,
        description=_prose(text),
        category=Category(category) if isinstance(category, str) else category,
        parameters=tuple(parameters),
        returns=returns,
        internal_failure_reasons=tuple(failures),
        examples=tuple(examples),
        notices=tuple(_prose(n) for n in notices),
    )
