from __future__ import annotations

from typing import Any, TextIO

from .consistency import ArtifactStatus, ConsistencyReport, WriteResult
from .validate import Severity, ValidationReport


def format_validation(report: ValidationReport, strict: bool = False) -> str:
    """Human-readable report for terminal output."""
    lines = []
    mark = "✓" if report.passed(strict) else "×"
    lines.append(f"  {mark} {report.identifier}")

    if report.missing_fields:
        lines.append(f"    - missing fields: {', '.join(sorted(report.missing_fields))}")

    for f in report.example_failures:
        lines.append(f"    - example {f.example_index}: {f.reason.value}")
        lines.append(f"        expected: {f.expected}")
        lines.append(f"        actual:   {f.actual}")
        if f.detail:
            lines.append(f"        detail:   {f.detail}")

    for issue in report.issues:
        path_str = f" {issue.path}:" if issue.path else ""
        level = "ERROR" if issue.severity == Severity.ERROR else "WARNING"
        lines.append(f"    - [{issue.check}]{path_str} {issue.message} ({level})")

    return "\n".join(lines)


def print_validation(
    reports: tuple[ValidationReport, ...], out: TextIO, *, strict: bool = False, verbose: bool = False
) -> None:
    """Print failing functions (all functions with ``verbose``) and a summary line."""
    failed = [r for r in reports if not r.passed(strict)]
    warned = [r for r in reports if r.warnings]
    for r in reports:
        if verbose or not r.passed(strict) or r.issues:
            out.write(format_validation(r, strict) + "\n")

    examples = sum(len(r.example_failures) for r in reports)
    out.write(
        f"\n  {len(reports)} functions validated: {len(reports) - len(failed)} passed, "
        f"{len(failed)} failed, {examples} failing examples, "
        f"{len(warned)} with warnings{' (strict)' if strict else ''}\n"
    )


def print_consistency(report: ConsistencyReport, out: TextIO, *, strict: bool = False) -> None:
    """Print every offending artifact with its diff, then a summary line."""
    for failed in report.failed_validation(strict):
        out.write(format_validation(failed, strict) + "\n")

    for c in report.drift:
        out.write(f"  × {c.label}: {c.status.value} ({c.path})\n")
        if c.status == ArtifactStatus.MISMATCH:
            out.write(c.diff)
            if not c.diff.endswith("\n"):
                out.write("\n")

    matched = sum(1 for c in report.checks if c.status == ArtifactStatus.MATCH)
    out.write(
        f"\n  {matched}/{len(report.checks)} artifacts up to date under {report.root}\n"
    )
    if not report.passed(strict):
        out.write("  Run with --mode write to regenerate.\n")


def print_write(result: WriteResult, out: TextIO, *, strict: bool = False) -> None:
    if result.refused:
        for failed in result.failed_validation(strict):
            out.write(format_validation(failed, strict) + "\n")
        out.write("\n  Validation failed; no artifacts written.\n")
        return
    for path in result.written:
        out.write(f"  wrote   {path}\n")
    for path in result.removed:
        out.write(f"  removed {path}\n")
    out.write(
        f"\n  {len(result.written)} written, {len(result.unchanged)} unchanged, "
        f"{len(result.removed)} removed under {result.root}\n"
    )


def report_json(report: ValidationReport, strict: bool = False) -> dict[str, Any]:
    """Machine-readable report for pipeline integration."""
    return {
        "identifier": report.identifier,
        "passed": report.passed(strict),
        "missing_fields": sorted(report.missing_fields),
        "example_failures": [
            {
                "example_index": f.example_index,
                "reason": f.reason.value,
                "expected": f.expected,
                "actual": f.actual,
                "detail": f.detail,
            }
            for f in report.example_failures
        ],
        "issues": [
            {
                "check": i.check,
                "severity": i.severity.value,
                "message": i.message,
                "path": i.path,
            }
            for i in report.issues
        ],
    }
