import argparse
import json
import logging
import math
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from exprdoc.aggregate import aggregate
from exprdoc.config import Settings
from exprdoc.consistency import check, write
from exprdoc.errors import ExprDocError
from exprdoc.executor import ExampleExecutor
from exprdoc.lang import Runtime
from exprdoc.load import DEFAULT_REGISTRY, load_registry
from exprdoc.reference import render_reference
from exprdoc.registry import FunctionRegistry
from exprdoc.report import print_consistency, print_validation, print_write, report_json
from exprdoc.result import Err, Ok
from exprdoc.validate import FailureMatch, Validator, validate_all

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERNAL = 2

logger = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> Settings | None:
    match Settings.from_env():
        case Err(e):
            print(f"Invalid configuration: {e}", file=sys.stderr)
            return None
        case Ok(settings):
            pass

    overrides = {
        "artifact_dir": getattr(args, "artifact_dir", None),
        "repository": getattr(args, "repository", None),
        "timeout": getattr(args, "timeout", None),
        "strict": getattr(args, "strict", None),
        "failure_match": getattr(args, "failure_match", None),
        "workers": getattr(args, "workers", None),
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    level = logging.DEBUG if getattr(args, "verbose", False) else settings.log_level
    logging.basicConfig(
        level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr
    )
    return settings


def _registry(target: str) -> FunctionRegistry | None:
    try:
        registry_or_err = load_registry(target)
    except ExprDocError as e:
        print(f"Invalid registry: {e}", file=sys.stderr)
        return None
    match registry_or_err:
        case str(err):
            print(f"Could not load registry: {err}", file=sys.stderr)
            return None
        case FunctionRegistry() as registry:
            return registry


def _validator(registry: FunctionRegistry, settings: Settings) -> Validator:
    executor = ExampleExecutor(Runtime(registry).evaluate, timeout=settings.timeout)
    return Validator(executor, failure_match=settings.failure_match)


def handle_validate(args: argparse.Namespace) -> int:
    """Validate every registered function and report; writes nothing."""
    settings = _settings(args)
    if settings is None:
        return EXIT_INTERNAL
    registry = _registry(args.registry)
    if registry is None:
        return EXIT_INTERNAL

    reports = validate_all(registry, _validator(registry, settings), workers=settings.workers)
    if args.json:
        data = [report_json(r, settings.strict) for r in reports]
        sys.stdout.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    else:
        print_validation(reports, sys.stdout, strict=settings.strict, verbose=args.verbose)
    ok = all(r.passed(settings.strict) for r in reports)
    return EXIT_OK if ok else EXIT_FAILED


def handle_generate(args: argparse.Namespace) -> int:
    """``check`` compares artifacts with the registry; ``write`` regenerates them."""
    settings = _settings(args)
    if settings is None:
        return EXIT_INTERNAL
    registry = _registry(args.registry)
    if registry is None:
        return EXIT_INTERNAL
    validator = _validator(registry, settings)

    match args.mode:
        case "check":
            report = check(
                registry,
                settings.artifact_dir,
                validator,
                workers=settings.workers,
                repository=settings.repository,
            )
            print_consistency(report, sys.stdout, strict=settings.strict)
            return EXIT_OK if report.passed(settings.strict) else EXIT_FAILED
        case "write":
            result = write(
                registry,
                settings.artifact_dir,
                validator,
                strict=settings.strict,
                workers=settings.workers,
                repository=settings.repository,
            )
            print_write(result, sys.stdout, strict=settings.strict)
            return EXIT_FAILED if result.refused else EXIT_OK
        case _:
            print(f"Unknown mode: {args.mode}", file=sys.stderr)
            return EXIT_INTERNAL


def _parse_sources(values: Sequence[str]) -> dict[str, Path] | str:
    sources: dict[str, Path] = {}
    for value in values:
        name, sep, directory = value.partition("=")
        if not sep or not name or not directory:
            return f"--source must look like NAME=DIR, got {value!r}"
        if name in sources:
            return f"Repository {name!r} given twice"
        sources[name] = Path(directory)
    return sources


def handle_reference(args: argparse.Namespace) -> int:
    """Aggregate artifact sets and print (or save) the Markdown reference."""
    if _settings(args) is None:
        return EXIT_INTERNAL
    match _parse_sources(args.source):
        case str(err):
            print(err, file=sys.stderr)
            return EXIT_INTERNAL
        case dict() as sources:
            pass

    try:
        collection = aggregate(sources)
    except ExprDocError as e:
        print(f"Cannot build reference: {e}", file=sys.stderr)
        return EXIT_INTERNAL

    text = render_reference(collection, title=args.title)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote reference for {len(collection)} functions to {args.output}")
    else:
        sys.stdout.write(text)
    return EXIT_OK


def _seconds(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number of seconds: {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive finite number, got {raw!r}")
    return value


def _add_engine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--registry",
        default=DEFAULT_REGISTRY,
        metavar="MODULE:ATTR",
        help=f"Registry or registry factory to document (default: {DEFAULT_REGISTRY}).",
    )
    parser.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat warnings such as functions without examples as failures.",
    )
    parser.add_argument(
        "--timeout",
        type=_seconds,
        metavar="SECONDS",
        help="Per-example time budget (default: 5).",
    )
    parser.add_argument(
        "--failure-match",
        type=FailureMatch,
        choices=list(FailureMatch),
        metavar="{kind,kind_and_message}",
        help="How declared failures are compared (default: kind_and_message).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Validation worker threads (default: CPU count).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Debug logging; list every function, not only failures.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exprdoc",
        description="Validate, generate and check documentation for expression-language functions",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Command: validate
    validate_parser = subparsers.add_parser(
        "validate",
        help="Run every documented example and cross-check metadata.",
    )
    validate_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print one machine-readable report per function instead of text.",
    )
    _add_engine_options(validate_parser)

    # Command: generate
    generate_parser = subparsers.add_parser(
        "generate",
        help="Check artifacts against the registry (CI gate) or regenerate them.",
    )
    generate_parser.add_argument(
        "--mode",
        choices=["check", "write"],
        default="check",
        help="check: compare and print diffs (default); write: regenerate artifacts.",
    )
    generate_parser.add_argument(
        "--artifact-dir",
        type=Path,
        metavar="DIR",
        help="Artifact root (default: docs/reference).",
    )
    generate_parser.add_argument(
        "--repository",
        help="Repository name written to the manifest (default: the registry's name).",
    )
    _add_engine_options(generate_parser)

    # Command: reference
    reference_parser = subparsers.add_parser(
        "reference",
        help="Aggregate artifact sets and render the Markdown reference.",
    )
    reference_parser.add_argument(
        "--source",
        action="append",
        required=True,
        metavar="NAME=DIR",
        help="Repository name and artifact root; repeat for each repository.",
    )
    reference_parser.add_argument(
        "--title", default="Function reference", help="Document title."
    )
    reference_parser.add_argument(
        "--output", "-o", metavar="FILE", help="Write to FILE instead of stdout."
    )
    reference_parser.add_argument(
        "--verbose", "-v", action="store_true", default=False, help="Debug logging."
    )
    return parser


def run(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    match args.command:
        case "validate":
            return handle_validate(args)
        case "generate":
            return handle_generate(args)
        case "reference":
            return handle_reference(args)
        case None:
            parser.print_help()
            return EXIT_INTERNAL
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            parser.print_help()
            return EXIT_INTERNAL


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the console script."""
    try:
        return run(argv)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        print(f"Internal error: {type(e).__name__}: {e}", file=sys.stderr)
        return EXIT_INTERNAL


if __name__ == "__main__":
    sys.exit(main())
