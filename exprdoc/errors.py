"""Exceptions raised by the documentation engine.

Only contract violations are raised: registering an incomplete or
duplicate function, or reading a broken artifact. Problems found while
validating examples or checking artifacts are collected into reports
(see ``exprdoc.validate`` and ``exprdoc.consistency``) instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class ExprDocError(Exception):
    """Base class for every error raised by exprdoc."""


class IncompleteMetadata(ExprDocError):
    """A FunctionDoc is missing one or more required fields."""

    def __init__(self, identifier: str, missing_fields: Iterable[str]) -> None:
        self.identifier = identifier
        self.missing_fields = frozenset(missing_fields)
        fields = ", ".join(sorted(self.missing_fields))
        super().__init__(
            f"Function '{identifier or '<unnamed>'}' is missing required fields: {fields}"
        )


class DuplicateIdentifier(ExprDocError):
    """Two functions were registered under the same identifier."""

    def __init__(self, identifier: str, existing: str | None = None) -> None:
        self.identifier = identifier
        self.existing = existing
        if existing is not None and existing != identifier:
            message = (
                f"Function '{identifier}' collides with '{existing}' "
                f"(both map to the same artifact file)"
            )
        else:
            message = f"Function '{identifier}' is already registered"
        super().__init__(message)


class MalformedArtifact(ExprDocError):
    """An artifact or manifest on disk cannot be parsed back into a doc."""

    def __init__(self, path: Path | str | None, reason: str) -> None:
        self.path = Path(path) if path is not None else None
        self.reason = reason
        where = str(self.path) if self.path is not None else "<artifact>"
        super().__init__(f"{where}: {reason}")


class MissingArtifact(ExprDocError):
    """A manifest lists a function whose artifact file does not exist."""

    def __init__(self, repository: str, identifier: str, path: Path) -> None:
        self.repository = repository
        self.identifier = identifier
        self.path = path
        super().__init__(
            f"{path}: no artifact for function '{identifier}' of repository '{repository}'"
        )


class ExpressionError(ExprDocError):
    """An error produced while parsing, compiling or running an expression.

    Documented functions raise this with the default ``function_call`` kind
    to signal one of their ``internal_failure_reasons``.
    """

    def __init__(self, message: str, kind: str = "function_call") -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)
