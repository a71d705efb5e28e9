"""Drift detection between the registry and checked-in artifacts.

``check`` is the CI gate. It regenerates every artifact in memory and
compares it byte-for-byte with the file on disk; it never writes.
``write`` is the separate, explicit regeneration step.

Every artifact ends up with one status:

    MATCH                 on-disk bytes equal the regenerated bytes
    MISMATCH              bytes differ; a unified diff is attached
    MISSING_ON_DISK       registered, but no file exists
    MISSING_IN_REGISTRY   a file exists for a function no longer registered

Anything but MATCH fails the gate, as does any validation failure.
"""

from __future__ import annotations

import difflib
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from .errors import MalformedArtifact
from .registry import FunctionRegistry, RegistryEntry
from .serialization import (
    FUNCTIONS_DIR,
    MANIFEST_FILE,
    artifact_filename,
    generate,
    generate_manifest,
    parse_artifact,
)
from .validate import Issue, Severity, ValidationReport, Validator

logger = logging.getLogger(__name__)


class ArtifactStatus(Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    MISSING_ON_DISK = "missing_on_disk"
    MISSING_IN_REGISTRY = "missing_in_registry"


@dataclass(frozen=True)
class ArtifactCheck:
    """Status of one artifact file. ``identifier`` is None for the manifest."""

    identifier: str | None
    path: Path
    status: ArtifactStatus
    diff: str = ""

    @property
    def label(self) -> str:
        return self.identifier if self.identifier is not None else self.path.name


@dataclass(frozen=True)
class ConsistencyReport:
    root: Path
    checks: tuple[ArtifactCheck, ...]
    validation: tuple[ValidationReport, ...]

    @property
    def drift(self) -> tuple[ArtifactCheck, ...]:
        return tuple(c for c in self.checks if c.status != ArtifactStatus.MATCH)

    def failed_validation(self, strict: bool = False) -> tuple[ValidationReport, ...]:
        return tuple(r for r in self.validation if not r.passed(strict))

    def passed(self, strict: bool = False) -> bool:
        return not self.drift and not self.failed_validation(strict)


@dataclass(frozen=True)
class WriteResult:
    root: Path
    validation: tuple[ValidationReport, ...]
    written: tuple[Path, ...] = ()
    unchanged: tuple[Path, ...] = ()
    removed: tuple[Path, ...] = ()
    refused: bool = False

    def failed_validation(self, strict: bool = False) -> tuple[ValidationReport, ...]:
        return tuple(r for r in self.validation if not r.passed(strict))


# ---------------------------------------------------------------------------
# Regeneration
# ---------------------------------------------------------------------------


def _regenerate(
    registry: FunctionRegistry, validator: Validator, workers: int | None
) -> tuple[tuple[ValidationReport, ...], dict[str, bytes | None]]:
    """Validate and generate every entry on a worker pool.

    Each worker fills only its own identifier's slot; results are read back
    in registration order. An entry whose artifact cannot be generated gets
    ``None`` and a failing report instead.
    """
    entries = registry.all()

    def work(entry: RegistryEntry) -> tuple[ValidationReport, bytes | None]:
        report = validator.validate(entry)
        if any(i.check == "example_value_serializable" for i in report.errors):
            return report, None
        try:
            return report, generate(entry.doc)
        except (TypeError, ValueError) as e:
            issue = Issue(
                "artifact_serializable",
                Severity.ERROR,
                f"Artifact cannot be generated: {e}",
            )
            return replace(report, issues=report.issues + (issue,)), None

    slots: dict[str, tuple[ValidationReport, bytes | None]] = {}
    if entries:
        with ThreadPoolExecutor(max_workers=workers or os.cpu_count() or 1) as pool:
            futures = {pool.submit(work, e): e.identifier for e in entries}
            for future in as_completed(futures):
                slots[futures[future]] = future.result()

    reports = tuple(slots[e.identifier][0] for e in entries)
    artifacts = {e.identifier: slots[e.identifier][1] for e in entries}
    return reports, artifacts


def _orphans(functions_dir: Path, expected: set[str]) -> list[Path]:
    if not functions_dir.is_dir():
        return []
    return sorted(
        p for p in functions_dir.glob("*.json") if p.is_file() and p.name not in expected
    )


def _orphan_identifier(path: Path) -> str:
    try:
        return parse_artifact(path.read_bytes(), path).identifier
    except MalformedArtifact:
        return path.stem


def _diff(on_disk: bytes, fresh: bytes, rel: str) -> str:
    lines = difflib.unified_diff(
        on_disk.decode("utf-8", errors="replace").splitlines(keepends=True),
        fresh.decode("utf-8").splitlines(keepends=True),
        fromfile=f"a/{rel} (checked in)",
        tofile=f"b/{rel} (generated)",
    )
    return "".join(lines)


def _compare(identifier: str | None, path: Path, fresh: bytes, rel: str) -> ArtifactCheck:
    if not path.is_file():
        return ArtifactCheck(identifier, path, ArtifactStatus.MISSING_ON_DISK)
    on_disk = path.read_bytes()
    if on_disk == fresh:
        return ArtifactCheck(identifier, path, ArtifactStatus.MATCH)
    return ArtifactCheck(
        identifier, path, ArtifactStatus.MISMATCH, _diff(on_disk, fresh, rel)
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def check(
    registry: FunctionRegistry,
    root: Path,
    validator: Validator,
    *,
    workers: int | None = None,
    repository: str | None = None,
) -> ConsistencyReport:
    """Compare regenerated artifacts with the files under ``root``. Read-only."""
    root = Path(root)
    functions_dir = root / FUNCTIONS_DIR
    reports, artifacts = _regenerate(registry, validator, workers)

    checks: list[ArtifactCheck] = []
    for identifier, fresh in artifacts.items():
        if fresh is None:
            continue
        name = artifact_filename(identifier)
        checks.append(
            _compare(identifier, functions_dir / name, fresh, f"{FUNCTIONS_DIR}/{name}")
        )

    expected = {artifact_filename(i) for i in artifacts}
    for path in _orphans(functions_dir, expected):
        checks.append(
            ArtifactCheck(_orphan_identifier(path), path, ArtifactStatus.MISSING_IN_REGISTRY)
        )

    manifest = generate_manifest(registry, repository)
    checks.append(_compare(None, root / MANIFEST_FILE, manifest, MANIFEST_FILE))

    report = ConsistencyReport(root=root, checks=tuple(checks), validation=reports)
    for c in report.drift:
        logger.warning("%s: %s", c.label, c.status.value)
    return report


def write(
    registry: FunctionRegistry,
    root: Path,
    validator: Validator,
    *,
    strict: bool = False,
    workers: int | None = None,
    repository: str | None = None,
) -> WriteResult:
    """Regenerate every artifact under ``root``.

    Nothing is written when any function fails validation. Artifact files
    of functions no longer registered are removed.
    """
    root = Path(root)
    functions_dir = root / FUNCTIONS_DIR
    reports, artifacts = _regenerate(registry, validator, workers)

    if any(not r.passed(strict) for r in reports):
        logger.error("Validation failed; refusing to write artifacts under %s", root)
        return WriteResult(root=root, validation=reports, refused=True)

    functions_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    unchanged: list[Path] = []

    def put(path: Path, content: bytes) -> None:
        if path.is_file() and path.read_bytes() == content:
            unchanged.append(path)
        else:
            written.append(path)
        path.write_bytes(content)

    for identifier, content in artifacts.items():
        if content is not None:
            put(functions_dir / artifact_filename(identifier), content)

    removed = _orphans(functions_dir, {artifact_filename(i) for i in artifacts})
    for path in removed:
        logger.info("Removing orphaned artifact %s", path)
        path.unlink()

    put(root / MANIFEST_FILE, generate_manifest(registry, repository))

    logger.info(
        "Wrote %d artifacts under %s (%d changed, %d removed)",
        len(artifacts),
        root,
        len(written),
        len(removed),
    )
    return WriteResult(
        root=root,
        validation=reports,
        written=tuple(written),
        unchanged=tuple(unchanged),
        removed=tuple(removed),
    )
