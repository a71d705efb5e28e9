"""Type specs for parameters and return values.

A type spec describes the kinds of value a parameter accepts or a function
returns. The grammar is deliberately small:

    type    := member ("|" member)*
    member  := "any" | "string" | "integer" | "float" | "boolean" | "null"
             | "regex" | "timestamp"
             | "array" [ "<" type ">" ]
             | "object" [ "<" type ">" ]

``array<string>`` is an array whose elements are strings; ``object<integer>``
is an object whose values are integers. A bare ``array`` or ``object``
places no constraint on its contents.

Specs are parsed once (at doc construction) and rendered canonically, so
``"string|integer"`` and ``"string | integer"`` produce the same artifact.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .values import Value, kind_of

PRIMITIVES: tuple[str, ...] = (
    "any",
    "string",
    "integer",
    "float",
    "boolean",
    "null",
    "regex",
    "timestamp",
)


class TypeSpecError(ValueError):
    """Raised for text that does not follow the type-spec grammar."""


# ---------------------------------------------------------------------------
# Type spec AST
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Primitive:
    """A scalar kind, or ``any``."""

    name: str


@dataclass(frozen=True)
class ArrayOf:
    """An array, optionally constrained to one element type."""

    element: TypeSpec | None = None


@dataclass(frozen=True)
class ObjectOf:
    """An object, optionally constrained to one value type."""

    value: TypeSpec | None = None


@dataclass(frozen=True)
class OneOf:
    """A union of two or more distinct members."""

    members: tuple[Primitive | ArrayOf | ObjectOf, ...]


TypeSpec = Primitive | ArrayOf | ObjectOf | OneOf


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

_TOKEN = re.compile(r"\s*(?:([a-z]+)|([<>|]))")


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        m = _TOKEN.match(text, pos)
        if m is None:
            raise TypeSpecError(f"Unexpected character {text[pos:].strip()[0]!r} in type {text!r}")
        tokens.append(m.group(1) or m.group(2))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> str:
        tok = self.peek()
        if tok is None:
            raise TypeSpecError(f"Unexpected end of type {self.text!r}")
        self.pos += 1
        return tok

    def parse(self) -> TypeSpec:
        spec = self.union()
        if self.peek() is not None:
            raise TypeSpecError(f"Unexpected {self.peek()!r} in type {self.text!r}")
        return spec

    def union(self) -> TypeSpec:
        members = [self.member()]
        while self.peek() == "|":
            self.take()
            members.append(self.member())
        return one_of(*members)

    def member(self) -> Primitive | ArrayOf | ObjectOf:
        name = self.take()
        if name in ("array", "object"):
            inner: TypeSpec | None = None
            if self.peek() == "<":
                self.take()
                inner = self.union()
                if self.take() != ">":
                    raise TypeSpecError(f"Expected '>' in type {self.text!r}")
            return ArrayOf(inner) if name == "array" else ObjectOf(inner)
        if name in PRIMITIVES:
            return Primitive(name)
        raise TypeSpecError(f"Unknown type {name!r} in {self.text!r}")


def parse_type(text: str) -> TypeSpec:
    """Parse a type-spec string. Raises TypeSpecError."""
    if not text or not text.strip():
        raise TypeSpecError("Empty type spec")
    return _Parser(text).parse()


def one_of(*members: TypeSpec) -> TypeSpec:
    """Build a union, flattening nested unions and dropping duplicates."""
    flat: list[Primitive | ArrayOf | ObjectOf] = []
    for m in members:
        for part in m.members if isinstance(m, OneOf) else (m,):
            if part not in flat:
                flat.append(part)
    if len(flat) == 1:
        return flat[0]
    return OneOf(tuple(flat))


# ---------------------------------------------------------------------------
# Rendering & matching
# ---------------------------------------------------------------------------


def render_type(spec: TypeSpec) -> str:
    if isinstance(spec, Primitive):
        return spec.name
    elif isinstance(spec, ArrayOf):
        return "array" if spec.element is None else f"array<{render_type(spec.element)}>"
    elif isinstance(spec, ObjectOf):
        return "object" if spec.value is None else f"object<{render_type(spec.value)}>"
    elif isinstance(spec, OneOf):
        return " | ".join(render_type(m) for m in spec.members)
    raise TypeError(f"Unknown type spec: {type(spec)}")


def accepts(spec: TypeSpec, value: Value) -> bool:
    """Does ``value`` inhabit ``spec``?"""
    if isinstance(spec, OneOf):
        return any(accepts(m, value) for m in spec.members)
    if isinstance(spec, Primitive) and spec.name == "any":
        return True
    try:
        kind = kind_of(value)
    except TypeError:
        return False
    if isinstance(spec, Primitive):
        return kind == spec.name
    elif isinstance(spec, ArrayOf):
        if kind != "array":
            return False
        return spec.element is None or all(accepts(spec.element, v) for v in value)
    elif isinstance(spec, ObjectOf):
        if kind != "object":
            return False
        return spec.value is None or all(accepts(spec.value, v) for v in value.values())
    return False
