"""Evaluation of expression-language programs against a function registry.

``Runtime.evaluate`` is the evaluator interface the example executor
consumes:

    evaluate(source, bindings=None) -> Ok(value) | Err(Failure)

Each call parses, compiles and runs ``source`` in a fresh scope; nothing
carries over between calls. ``bindings`` is the event the program sees as
``.`` and is deep-copied before use.

Failure kinds:

    parse          the source is not valid syntax
    compile        unknown function, bad arguments, or a fallible call
                   that is not marked with "!"
    function_call  a function failed while running
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field

from exprdoc.errors import ExpressionError
from exprdoc.model import Failure, FunctionDoc
from exprdoc.registry import FunctionRegistry
from exprdoc.result import Err, Ok, Result
from exprdoc.typespec import accepts, render_type
from exprdoc.values import Value, kind_of

from .nodes import (
    ArrayExpr,
    Assign,
    Call,
    Expr,
    Literal,
    ObjectExpr,
    Path,
    Program,
    Statement,
    Variable,
    iter_calls,
)
from .parser import parse

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """Mutable state of one program run."""

    event: Value
    variables: dict[str, Value] = field(default_factory=dict)


def _compile_error(message: str, call: Call) -> ExpressionError:
    return ExpressionError(f"{message} at {call.span}", kind="compile")


class Runtime:
    """Runs programs that may call any function in ``registry``."""

    def __init__(self, registry: FunctionRegistry) -> None:
        self.registry = registry

    def evaluate(self, source: str, bindings: Value = None) -> Result[Value, Failure]:
        try:
            program = parse(source)
            self.compile(program)
            scope = Scope(event=copy.deepcopy(bindings) if bindings is not None else {})
            return Ok(self.run(program, scope))
        except ExpressionError as e:
            logger.debug("Evaluation failed (%s): %s", e.kind, e.message)
            return Err(Failure(kind=e.kind, message=e.message))

    # -- compile ------------------------------------------------------------

    def compile(self, program: Program) -> None:
        """Static checks: every call names a known function with valid arguments."""
        for call in iter_calls(program):
            entry = self.registry.get(call.name)
            if entry is None:
                raise _compile_error(f'call to undefined function "{call.name}"', call)
            self._check_arguments(call, entry.doc)
            if entry.doc.fallible and not call.abort_on_error:
                raise _compile_error(
                    f'call to fallible function "{call.name}" must be marked with "!"',
                    call,
                )

    def _check_arguments(self, call: Call, doc: FunctionDoc) -> None:
        seen: set[str] = set()
        positional = 0
        for arg in call.args:
            if arg.name is None:
                if seen:
                    raise _compile_error(
                        f'positional argument after named argument in "{call.name}"', call
                    )
                if positional >= len(doc.parameters):
                    raise _compile_error(
                        f'too many arguments for "{call.name}": expected at most '
                        f"{len(doc.parameters)}",
                        call,
                    )
                positional += 1
                continue
            if doc.get_parameter(arg.name) is None:
                raise _compile_error(
                    f'unknown argument "{arg.name}" for function "{call.name}"', call
                )
            if arg.name in seen or any(
                p.name == arg.name for p in doc.parameters[:positional]
            ):
                raise _compile_error(
                    f'argument "{arg.name}" given twice to "{call.name}"', call
                )
            seen.add(arg.name)
        bound = {p.name for p in doc.parameters[:positional]} | seen
        for p in doc.required_parameters:
            if p.name not in bound:
                raise _compile_error(
                    f'missing required argument "{p.name}" for function "{call.name}"',
                    call,
                )

    # -- run ----------------------------------------------------------------

    def run(self, program: Program, scope: Scope) -> Value:
        result: Value = None
        for statement in program.statements:
            result = self._statement(statement, scope)
        return result

    def _statement(self, statement: Statement, scope: Scope) -> Value:
        if isinstance(statement, Assign):
            value = self._expr(statement.value, scope)
            target = statement.target
            if isinstance(target, Variable):
                scope.variables[target.name] = value
            else:
                _assign_path(scope, target, value)
            return value
        return self._expr(statement, scope)

    def _expr(self, expr: Expr, scope: Scope) -> Value:
        if isinstance(expr, Literal):
            return expr.value
        elif isinstance(expr, ArrayExpr):
            return [self._expr(item, scope) for item in expr.items]
        elif isinstance(expr, ObjectExpr):
            return {k: self._expr(v, scope) for k, v in expr.entries}
        elif isinstance(expr, Variable):
            if expr.name not in scope.variables:
                raise ExpressionError(
                    f'undefined variable "{expr.name}" at {expr.span}', kind="compile"
                )
            return scope.variables[expr.name]
        elif isinstance(expr, Path):
            return _read_path(scope.event, expr)
        elif isinstance(expr, Call):
            return self._call(expr, scope)
        raise TypeError(f"Unknown expression type: {type(expr)}")

    def _call(self, call: Call, scope: Scope) -> Value:
        entry = self.registry.get(call.name)
        assert entry is not None, "compile() guarantees the function exists"
        doc = entry.doc

        kwargs: dict[str, Value] = {}
        for i, arg in enumerate(call.args):
            name = arg.name if arg.name is not None else doc.parameters[i].name
            kwargs[name] = self._expr(arg.value, scope)

        try:
            for p in doc.parameters:
                if p.name not in kwargs:
                    if p.default is not None:
                        kwargs[p.name] = copy.deepcopy(p.default)
                    continue
                value = kwargs[p.name]
                if not accepts(p.type, value):
                    raise ExpressionError(
                        f'expected {render_type(p.type)} for argument "{p.name}", '
                        f"got {kind_of(value)}"
                    )
                chosen = value if isinstance(value, list) else [value]
                if p.enum_variants and any(
                    c not in [v.value for v in p.enum_variants] for c in chosen
                ):
                    allowed = ", ".join(f'"{v.value}"' for v in p.enum_variants)
                    raise ExpressionError(
                        f'invalid value for argument "{p.name}": expected one of {allowed}'
                    )
            return entry.evaluator(**kwargs)
        except ExpressionError as e:
            raise ExpressionError(
                f'function call error for "{call.name}" at {call.span}: {e.message}'
            ) from e


def _read_path(event: Value, path: Path) -> Value:
    value = event
    for segment in path.segments:
        if not isinstance(value, dict):
            return None
        value = value.get(segment)
    return value


def _assign_path(scope: Scope, path: Path, value: Value) -> None:
    if not path.segments:
        scope.event = value
        return
    if not isinstance(scope.event, dict):
        scope.event = {}
    node = scope.event
    for segment in path.segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child
    node[path.segments[-1]] = value
