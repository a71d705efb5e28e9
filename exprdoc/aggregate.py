"""Read-only merge of artifact sets from one or more repositories.

Each repository contributes one artifact root (``manifest.json`` plus
``functions/``). The manifest decides which functions are expected; a
listed function without a readable artifact is fatal. The collection is
built fresh per call and never cached.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import MalformedArtifact, MissingArtifact
from .model import Category, FunctionDoc
from .serialization import (
    FUNCTIONS_DIR,
    MANIFEST_FILE,
    artifact_filename,
    parse_artifact,
    parse_manifest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocEntry:
    repository: str
    doc: FunctionDoc

    @property
    def key(self) -> tuple[str, str]:
        return (self.repository, self.doc.identifier)


class DocCollection:
    """Function docs keyed by ``(repository, identifier)``.

    Iteration follows the order repositories were given, then manifest
    order within each repository.
    """

    def __init__(self, entries: tuple[DocEntry, ...]) -> None:
        self._entries = entries
        self._index = {e.key: e for e in entries}

    def get(self, repository: str, identifier: str) -> DocEntry | None:
        return self._index.get((repository, identifier))

    def repositories(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(e.repository for e in self._entries))

    def by_category(self) -> dict[Category, tuple[DocEntry, ...]]:
        """Entries grouped by category, categories in enum order."""
        groups: dict[Category, list[DocEntry]] = {}
        for e in self._entries:
            groups.setdefault(e.doc.category, []).append(e)
        return {c: tuple(groups[c]) for c in Category if c in groups}

    def __iter__(self) -> Iterator[DocEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index


def _load_repository(repository: str, root: Path) -> list[DocEntry]:
    manifest_path = root / MANIFEST_FILE
    if not manifest_path.is_file():
        raise MalformedArtifact(manifest_path, "manifest not found")
    manifest = parse_manifest(manifest_path.read_bytes(), manifest_path)
    if manifest.repository != repository:
        raise MalformedArtifact(
            manifest_path,
            f"manifest belongs to repository '{manifest.repository}', not '{repository}'",
        )

    entries: list[DocEntry] = []
    for identifier in manifest.functions:
        path = root / FUNCTIONS_DIR / artifact_filename(identifier)
        if not path.is_file():
            raise MissingArtifact(repository, identifier, path)
        doc = parse_artifact(path.read_bytes(), path)
        if doc.identifier != identifier:
            raise MalformedArtifact(
                path, f"artifact describes '{doc.identifier}', manifest expects '{identifier}'"
            )
        entries.append(DocEntry(repository=repository, doc=doc))
    logger.debug("Loaded %d functions from %s (%s)", len(entries), repository, root)
    return entries


def aggregate(sources: Mapping[str, Path | str]) -> DocCollection:
    """Build a collection from ``{repository: artifact root}``.

    Fails fast with MalformedArtifact or MissingArtifact on the first bad
    entry.
    """
    entries: list[DocEntry] = []
    for repository, root in sources.items():
        entries.extend(_load_repository(repository, Path(root)))
    return DocCollection(tuple(entries))
