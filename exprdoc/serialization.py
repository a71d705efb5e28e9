"""Canonical JSON artifacts for function docs.

One artifact per function, plus a manifest per repository:

    <root>/manifest.json
    <root>/functions/<sanitized identifier>.json

Output is a deterministic function of the FunctionDoc: UTF-8, two-space
indent, fixed key order, non-ASCII kept as-is, trailing newline. Every key
is always written (absent optional values as ``null``) so that diffs only
ever show changed values.

Round-trip: generate(parse_artifact(generate(d))) == generate(d).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import IncompleteMetadata, MalformedArtifact
from .model import (
    Category,
    EnumVariant,
    Example,
    Failure,
    FunctionDoc,
    Parameter,
    ReturnSpec,
    is_complete,
)
from .registry import FunctionRegistry, sanitize_identifier
from .result import Err, Ok
from .typespec import TypeSpecError, parse_type, render_type

FUNCTIONS_DIR = "functions"
MANIFEST_FILE = "manifest.json"


def artifact_filename(identifier: str) -> str:
    return f"{sanitize_identifier(identifier)}.json"


def _encode(data: dict[str, Any]) -> bytes:
    return (json.dumps(data, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def _field(d: dict[str, Any], key: str, kind: type | tuple[type, ...], what: str) -> Any:
    value = d[key]
    if not isinstance(value, kind):
        raise ValueError(f"'{key}' must be {what}, got {type(value).__name__}")
    return value


def _str(d: dict[str, Any], key: str) -> str:
    return _field(d, key, str, "a string")


def _opt_str(d: dict[str, Any], key: str) -> str | None:
    return _field(d, key, (str, type(None)), "a string or null")


def _bool(d: dict[str, Any], key: str) -> bool:
    return _field(d, key, bool, "a boolean")


def _dict(d: dict[str, Any], key: str) -> dict[str, Any]:
    return _field(d, key, dict, "an object")


def _dicts(d: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = _field(d, key, list, "a list")
    if not all(isinstance(i, dict) for i in items):
        raise ValueError(f"'{key}' must be a list of objects")
    return items


def _strs(d: dict[str, Any], key: str) -> tuple[str, ...]:
    items = _field(d, key, list, "a list")
    if not all(isinstance(i, str) for i in items):
        raise ValueError(f"'{key}' must be a list of strings")
    return tuple(items)


# ---------------------------------------------------------------------------
# FunctionDoc
# ---------------------------------------------------------------------------


def parameter_to_json(p: Parameter) -> dict[str, Any]:
    return {
        "name": p.name,
        "type": render_type(p.type),
        "description": p.description,
        "required": p.required,
        "default": p.default,
        "enum": [{"value": v.value, "description": v.description} for v in p.enum_variants],
    }


def parameter_from_json(d: dict[str, Any]) -> Parameter:
    return Parameter(
        name=_str(d, "name"),
        type=parse_type(_str(d, "type")),
        description=_str(d, "description"),
        required=_bool(d, "required"),
        default=d["default"],
        enum_variants=tuple(
            EnumVariant(value=v["value"], description=_str(v, "description"))
            for v in _dicts(d, "enum")
        ),
    )


def expected_to_json(expected: Ok[Any] | Err[Failure]) -> dict[str, Any]:
    match expected:
        case Ok(value):
            return {"ok": value}
        case Err(Failure(kind=kind, message=message)):
            return {"error": {"kind": kind, "message": message}}
    raise TypeError(f"Unknown expected result: {type(expected)}")


def expected_from_json(d: dict[str, Any]) -> Ok[Any] | Err[Failure]:
    if set(d) == {"ok"}:
        return Ok(d["ok"])
    if set(d) == {"error"}:
        e = _dict(d, "error")
        return Err(Failure(kind=_str(e, "kind"), message=_str(e, "message")))
    raise ValueError(f"expected result must have exactly one of 'ok' or 'error', got {sorted(d)}")


def example_to_json(ex: Example) -> dict[str, Any]:
    return {
        "title": ex.title,
        "source": ex.source,
        "input": ex.input,
        "result": expected_to_json(ex.expected),
        "notes": ex.notes,
        "requires_host": ex.requires_host,
    }


def example_from_json(d: dict[str, Any]) -> Example:
    return Example(
        source=_str(d, "source"),
        expected=expected_from_json(_dict(d, "result")),
        title=_opt_str(d, "title"),
        notes=_opt_str(d, "notes"),
        input=d["input"],
        requires_host=_bool(d, "requires_host"),
    )


def doc_to_json(doc: FunctionDoc) -> dict[str, Any]:
    return {
        "identifier": doc.identifier,
        "summary": doc.summary,
        "description": doc.description,
        "category": doc.category.value,
        "fallible": doc.fallible,
        "parameters": [parameter_to_json(p) for p in doc.parameters],
        "returns": {
            "type": render_type(doc.returns.type),
            "description": doc.returns.description,
            "rules": list(doc.returns.rules),
        },
        "internal_failure_reasons": list(doc.internal_failure_reasons),
        "examples": [example_to_json(ex) for ex in doc.examples],
        "notices": list(doc.notices),
    }


def doc_from_json(d: dict[str, Any]) -> FunctionDoc:
    r = _dict(d, "returns")
    doc = FunctionDoc(
        identifier=_str(d, "identifier"),
        summary=_str(d, "summary"),
        description=_str(d, "description"),
        category=Category(_str(d, "category")),
        parameters=tuple(parameter_from_json(p) for p in _dicts(d, "parameters")),
        returns=ReturnSpec(
            type=parse_type(_str(r, "type")),
            description=_str(r, "description"),
            rules=_strs(r, "rules"),
        ),
        internal_failure_reasons=_strs(d, "internal_failure_reasons"),
        examples=tuple(example_from_json(ex) for ex in _dicts(d, "examples")),
        notices=_strs(d, "notices"),
    )
    if _bool(d, "fallible") != doc.fallible:
        raise ValueError("'fallible' disagrees with 'internal_failure_reasons'")
    return doc


def generate(doc: FunctionDoc) -> bytes:
    """Serialize a complete FunctionDoc. Raises IncompleteMetadata otherwise."""
    match is_complete(doc):
        case Err(missing):
            raise IncompleteMetadata(doc.identifier, missing)
        case Ok(_):
            pass
    return _encode(doc_to_json(doc))


def parse_artifact(data: bytes | str, path: Path | str | None = None) -> FunctionDoc:
    """Parse an artifact back into a FunctionDoc. Raises MalformedArtifact."""
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        raw = json.loads(text)
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        doc = doc_from_json(raw)
    except KeyError as e:
        raise MalformedArtifact(path, f"missing key {e}") from e
    except TypeSpecError as e:
        raise MalformedArtifact(path, f"invalid type spec: {e}") from e
    except (ValueError, TypeError, AttributeError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        raise MalformedArtifact(path, str(e)) from e

    match is_complete(doc):
        case Err(missing):
            raise MalformedArtifact(
                path, f"incomplete function doc: {', '.join(sorted(missing))}"
            )
        case Ok(_):
            return doc


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Manifest:
    repository: str
    functions: tuple[str, ...]


def generate_manifest(registry: FunctionRegistry, repository: str | None = None) -> bytes:
    return _encode(
        {
            "repository": repository or registry.name,
            "functions": list(registry.identifiers()),
        }
    )


def parse_manifest(data: bytes | str, path: Path | str | None = None) -> Manifest:
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        raw = json.loads(text)
        repository = raw["repository"]
        functions = raw["functions"]
    except KeyError as e:
        raise MalformedArtifact(path, f"missing key {e}") from e
    except (ValueError, TypeError) as e:
        raise MalformedArtifact(path, str(e)) from e

    if not isinstance(repository, str) or not repository:
        raise MalformedArtifact(path, "'repository' must be a non-empty string")
    if not isinstance(functions, list) or not all(isinstance(f, str) for f in functions):
        raise MalformedArtifact(path, "'functions' must be a list of identifiers")
    if len(set(functions)) != len(functions):
        raise MalformedArtifact(path, "'functions' lists an identifier twice")
    return Manifest(repository=repository, functions=tuple(functions))
