"""Validation of documented functions.

A ValidationReport is built per function in two steps:

1. Metadata: completeness, then cross-checks between fields (parameter
   order, defaults, enum values, failure reasons, summary shape).
2. Examples: every example is executed and its actual outcome compared
   with the declared one.

Problems are collected, never raised, so one run reports every offending
function and example at once. The caller decides pass/fail through
``ValidationReport.passed(strict)``.
"""

from __future__ import annotations

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum

from .executor import ExampleExecutor, ExecutionOutcome, OutcomeStatus
from .model import Example, Failure, FunctionDoc, is_complete
from .registry import FunctionRegistry, RegistryEntry
from .result import Err, Ok
from .typespec import accepts, render_type
from .values import Value, is_json_value, render_value, values_equal

logger = logging.getLogger(__name__)


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    check: str
    severity: Severity
    message: str
    path: str | None = None


class Reason(Enum):
    DID_NOT_PARSE = "ExampleDidNotParse"
    TIMED_OUT = "ExampleTimedOut"
    MISMATCH = "ExampleMismatch"
    INTERNAL = "ExampleInternalError"


@dataclass(frozen=True)
class ExampleFailure:
    """An example whose actual outcome differs from the declared one.

    ``expected`` and ``actual`` are rendered for human inspection.
    """

    example_index: int
    expected: str
    actual: str
    reason: Reason
    detail: str | None = None


@dataclass(frozen=True)
class ValidationReport:
    identifier: str
    missing_fields: frozenset[str] = frozenset()
    example_failures: tuple[ExampleFailure, ...] = ()
    issues: tuple[Issue, ...] = ()

    @property
    def errors(self) -> tuple[Issue, ...]:
        return tuple(i for i in self.issues if i.severity == Severity.ERROR)

    @property
    def warnings(self) -> tuple[Issue, ...]:
        return tuple(i for i in self.issues if i.severity == Severity.WARNING)

    def passed(self, strict: bool = False) -> bool:
        if self.missing_fields or self.example_failures or self.errors:
            return False
        return not (strict and self.warnings)


class FailureMatch(Enum):
    KIND = "kind"
    KIND_AND_MESSAGE = "kind_and_message"


@dataclass
class _Context:
    issues: list[Issue] = field(default_factory=list)

    def error(self, check: str, message: str, path: str | None = None) -> None:
        self.issues.append(Issue(check, Severity.ERROR, message, path))

    def warning(self, check: str, message: str, path: str | None = None) -> None:
        self.issues.append(Issue(check, Severity.WARNING, message, path))


def describe_result(result: Ok[Value] | Err[Failure] | None) -> str:
    match result:
        case Ok(value):
            try:
                return render_value(value)
            except (TypeError, ValueError):
                return repr(value)
        case Err(Failure(kind=kind, message=message)):
            return f"error[{kind}]: {message}" if message else f"error[{kind}]"
        case _:
            return "<no result>"


# ---------------------------------------------------------------------------
# Metadata cross-checks
# ---------------------------------------------------------------------------


def check_metadata(doc: FunctionDoc, ctx: _Context) -> None:
    if "\n" in doc.summary:
        ctx.error("summary_single_line", "Summary must fit on one line", "summary")

    seen: set[str] = set()
    optional_seen = False
    for i, p in enumerate(doc.parameters):
        path = f"parameters[{i}]"
        if p.name in seen:
            ctx.error("parameter_names_unique", f"Duplicate parameter '{p.name}'", path)
        seen.add(p.name)

        if p.required and optional_seen:
            ctx.error(
                "parameter_order",
                f"Required parameter '{p.name}' follows an optional parameter",
                path,
            )
        optional_seen = optional_seen or not p.required

        if p.default is not None:
            if p.required:
                ctx.error(
                    "default_on_required",
                    f"Required parameter '{p.name}' declares a default",
                    f"{path}.default",
                )
            if not accepts(p.type, p.default):
                ctx.error(
                    "default_type",
                    f"Default {render_value(p.default)} of '{p.name}' is not "
                    f"{render_type(p.type)}",
                    f"{path}.default",
                )

        if p.enum_variants:
            values = [v.value for v in p.enum_variants]
            if len(set(values)) != len(values):
                ctx.error(
                    "enum_values_unique",
                    f"Parameter '{p.name}' repeats an enum value",
                    f"{path}.enum_variants",
                )
            # An array parameter restricts each of its elements.
            for v in p.enum_variants:
                if not (accepts(p.type, v.value) or accepts(p.type, [v.value])):
                    ctx.error(
                        "enum_value_type",
                        f"Enum value {render_value(v.value)} of '{p.name}' is not "
                        f"{render_type(p.type)}",
                        f"{path}.enum_variants",
                    )
            chosen = p.default if isinstance(p.default, list) else [p.default]
            if p.default is not None and any(c not in values for c in chosen):
                ctx.error(
                    "enum_default",
                    f"Default {render_value(p.default)} of '{p.name}' is not one of "
                    "its enum values",
                    f"{path}.default",
                )

    reasons = doc.internal_failure_reasons
    if len(set(reasons)) != len(reasons):
        ctx.error(
            "failure_reasons_distinct",
            "Internal failure reasons must be distinct",
            "internal_failure_reasons",
        )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class Validator:
    def __init__(
        self,
        executor: ExampleExecutor,
        *,
        failure_match: FailureMatch = FailureMatch.KIND_AND_MESSAGE,
    ) -> None:
        self.executor = executor
        self.failure_match = failure_match

    def validate(self, entry: RegistryEntry) -> ValidationReport:
        doc = entry.doc
        ctx = _Context()

        missing: frozenset[str] = frozenset()
        match is_complete(doc):
            case Err(fields):
                missing = fields
            case Ok(_):
                pass

        check_metadata(doc, ctx)

        if not doc.examples:
            ctx.warning("no_examples", f"Function '{doc.identifier}' has no examples")

        call = re.compile(rf"\b{re.escape(doc.identifier)}\s*!?\s*\(")
        failures: list[ExampleFailure] = []
        for i, ex in enumerate(doc.examples):
            path = f"examples[{i}]"
            self._check_declaration(doc, ex, path, ctx)
            if not call.search(ex.source):
                ctx.warning(
                    "example_calls_function",
                    f"Example does not call '{doc.identifier}'",
                    path,
                )

            outcome = self.executor.run(entry, ex)
            logger.debug(
                "%s example %d: %s", doc.identifier, i, outcome.status.value
            )
            if outcome.status == OutcomeStatus.SKIPPED:
                ctx.warning(
                    "example_skipped",
                    f"Example not executed: {outcome.detail}",
                    path,
                )
                continue
            failure = self.compare(i, ex, outcome)
            if failure is not None:
                failures.append(failure)

        report = ValidationReport(
            identifier=doc.identifier,
            missing_fields=missing,
            example_failures=tuple(failures),
            issues=tuple(ctx.issues),
        )
        if not report.passed():
            logger.info("Validation failed for %r", doc.identifier)
        return report

    def _check_declaration(
        self, doc: FunctionDoc, ex: Example, path: str, ctx: _Context
    ) -> None:
        match ex.expected:
            case Ok(value):
                if not is_json_value(value):
                    ctx.error(
                        "example_value_serializable",
                        "Expected value cannot be written to an artifact",
                        f"{path}.expected",
                    )
                elif not accepts(doc.returns.type, value):
                    ctx.error(
                        "example_return_type",
                        f"Expected value {render_value(value)} is not "
                        f"{render_type(doc.returns.type)}",
                        f"{path}.expected",
                    )
            case Err(_):
                if not doc.fallible:
                    ctx.error(
                        "failure_undeclared",
                        "Example expects a failure but the function declares no "
                        "internal failure reasons",
                        f"{path}.expected",
                    )
        if ex.input is not None and not is_json_value(ex.input):
            ctx.error(
                "example_value_serializable",
                "Example input cannot be written to an artifact",
                f"{path}.input",
            )

    def compare(
        self, index: int, ex: Example, outcome: ExecutionOutcome
    ) -> ExampleFailure | None:
        """Compare one executed example with its declaration."""
        expected = describe_result(ex.expected)
        actual = describe_result(outcome.result)

        match outcome.status:
            case OutcomeStatus.DID_NOT_PARSE:
                return ExampleFailure(
                    index, expected, actual, Reason.DID_NOT_PARSE, outcome.detail
                )
            case OutcomeStatus.TIMED_OUT:
                return ExampleFailure(
                    index, expected, "<timed out>", Reason.TIMED_OUT, outcome.detail
                )
            case OutcomeStatus.INTERNAL:
                return ExampleFailure(
                    index, expected, "<internal error>", Reason.INTERNAL, outcome.detail
                )

        if self._matches(ex.expected, outcome.result):
            return None
        return ExampleFailure(index, expected, actual, Reason.MISMATCH)

    def _matches(
        self,
        expected: Ok[Value] | Err[Failure],
        actual: Ok[Value] | Err[Failure] | None,
    ) -> bool:
        match expected, actual:
            case Ok(want), Ok(got):
                try:
                    return values_equal(want, got)
                except TypeError:
                    return False
            case Err(want), Err(got):
                if want.kind != got.kind:
                    return False
                # An empty declared message asks for a kind-only comparison.
                if self.failure_match == FailureMatch.KIND or not want.message:
                    return True
                return want.message == got.message
            case _:
                return False


def validate_all(
    registry: FunctionRegistry,
    validator: Validator,
    *,
    workers: int | None = None,
) -> tuple[ValidationReport, ...]:
    """Validate every entry in parallel; reports come back in registration order."""
    entries = registry.all()
    if not entries:
        return ()
    max_workers = workers or os.cpu_count() or 1
    reports: dict[str, ValidationReport] = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(validator.validate, e): e.identifier for e in entries}
        for future in as_completed(futures):
            reports[futures[future]] = future.result()
    return tuple(reports[e.identifier] for e in entries)
