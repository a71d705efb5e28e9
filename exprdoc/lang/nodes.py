"""Syntax tree for the expression language.

    program    = statement (sep statement)*
    statement  = assignment | expression
    assignment = (variable | path) "=" expression
    expression = literal | array | object | path | variable | call
               | "(" expression ")"
    call       = ident ["!"] "(" [argument ("," argument)*] ")"
    argument   = [ident ":"] expression

A trailing ``!`` marks a call to a fallible function: a failure aborts the
program with a function-call error.
"""

from __future__ import annotations

from dataclasses import dataclass

from exprdoc.values import Value


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def __str__(self) -> str:
        return f"({self.start}:{self.end})"


@dataclass(frozen=True)
class Literal:
    value: Value


@dataclass(frozen=True)
class ArrayExpr:
    items: tuple[Expr, ...]


@dataclass(frozen=True)
class ObjectExpr:
    entries: tuple[tuple[str, Expr], ...]


@dataclass(frozen=True)
class Variable:
    name: str
    span: Span


@dataclass(frozen=True)
class Path:
    """``.`` is the event root; ``.a.b`` walks into nested objects."""

    segments: tuple[str, ...]


@dataclass(frozen=True)
class Argument:
    name: str | None
    value: Expr


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple[Argument, ...]
    abort_on_error: bool
    span: Span


@dataclass(frozen=True)
class Assign:
    target: Variable | Path
    value: Expr


@dataclass(frozen=True)
class Program:
    statements: tuple[Statement, ...]


Expr = Literal | ArrayExpr | ObjectExpr | Variable | Path | Call
Statement = Expr | Assign


def iter_calls(node: Program | Statement | Argument) -> list[Call]:
    """Every call in ``node``, outermost first."""
    found: list[Call] = []
    if isinstance(node, Program):
        for s in node.statements:
            found.extend(iter_calls(s))
    elif isinstance(node, Assign):
        found.extend(iter_calls(node.value))
    elif isinstance(node, Call):
        found.append(node)
        for a in node.args:
            found.extend(iter_calls(a.value))
    elif isinstance(node, ArrayExpr):
        for item in node.items:
            found.extend(iter_calls(item))
    elif isinstance(node, ObjectExpr):
        for _, v in node.entries:
            found.extend(iter_calls(v))
    elif isinstance(node, Argument):
        found.extend(iter_calls(node.value))
    return found
