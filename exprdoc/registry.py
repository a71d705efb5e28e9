"""The explicit, ordered collection of documented functions.

A registry is built once at process start and passed to every component
that needs it; there is no module-level registry. Registration order is
preserved and drives the order of generated artifacts.

A function can be registered two ways:

    registry.register("upcase", doc, evaluator)
    registry.register_function(upcase)      # any DocumentedFunction

Registration fails fast: an incomplete doc raises IncompleteMetadata and a
repeated identifier raises DuplicateIdentifier.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .errors import DuplicateIdentifier, IncompleteMetadata
from .model import DEFAULT_CATEGORIES, Category, FunctionDoc, is_complete
from .result import Err, Ok
from .values import Value

logger = logging.getLogger(__name__)

Evaluator = Callable[..., Value]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_identifier(identifier: str) -> str:
    """Map an identifier to the stem of its artifact file name."""
    return _UNSAFE_FILENAME_CHARS.sub("_", identifier)


@runtime_checkable
class DocumentedFunction(Protocol):
    """Anything that carries its own FunctionDoc and can be called."""

    doc: FunctionDoc

    def __call__(self, *args: Value, **kwargs: Value) -> Value: ...


@dataclass(frozen=True)
class RegistryEntry:
    identifier: str
    doc: FunctionDoc
    evaluator: Evaluator


class FunctionRegistry:
    """An ordered mapping of identifier to documented function.

    ``name`` identifies the repository the functions belong to; it is
    written to the artifact manifest and keys the aggregated docs.
    """

    def __init__(
        self,
        name: str,
        *,
        categories: Iterable[Category] = DEFAULT_CATEGORIES,
    ) -> None:
        self.name = name
        self.categories = frozenset(categories)
        self._entries: dict[str, RegistryEntry] = {}
        self._filenames: dict[str, str] = {}

    def register(
        self, identifier: str, doc: FunctionDoc, evaluator: Evaluator
    ) -> RegistryEntry:
        if identifier in self._entries:
            raise DuplicateIdentifier(identifier)

        missing: set[str] = set()
        match is_complete(doc):
            case Err(fields):
                missing |= fields
            case Ok(_):
                pass
        if doc.category not in self.categories:
            missing.add("category")
        if doc.identifier != identifier:
            # The doc must describe the function it is registered as.
            missing.add("identifier")
        if not callable(evaluator):
            missing.add("evaluator")
        if missing:
            raise IncompleteMetadata(identifier, missing)

        stem = sanitize_identifier(identifier)
        if stem in self._filenames:
            raise DuplicateIdentifier(identifier, existing=self._filenames[stem])

        entry = RegistryEntry(identifier=identifier, doc=doc, evaluator=evaluator)
        self._entries[identifier] = entry
        self._filenames[stem] = identifier
        logger.debug("Registered function %r in %r", identifier, self.name)
        return entry

    def register_function(self, fn: DocumentedFunction) -> RegistryEntry:
        if not isinstance(fn, DocumentedFunction) or not isinstance(
            getattr(fn, "doc", None), FunctionDoc
        ):
            raise TypeError(
                f"{fn!r} does not provide a FunctionDoc; decorate it with @documented"
            )
        return self.register(fn.doc.identifier, fn.doc, fn)

    def all(self) -> tuple[RegistryEntry, ...]:
        return tuple(self._entries.values())

    def get(self, identifier: str) -> RegistryEntry | None:
        return self._entries.get(identifier)

    def identifiers(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"FunctionRegistry({self.name!r}, {len(self)} functions)"


@dataclass(frozen=True)
class DocumentedCallable:
    """A plain function paired with its FunctionDoc."""

    doc: FunctionDoc
    fn: Evaluator

    def __call__(self, *args: Value, **kwargs: Value) -> Value:
        return self.fn(*args, **kwargs)


def documented(doc: FunctionDoc) -> Callable[[Evaluator], DocumentedCallable]:
    """Decorator attaching a FunctionDoc to its implementation.

        @documented(function_doc("upcase", ...))
        def upcase(value: str) -> str:
            return value.upper()

    Nothing is registered here; registries list their functions explicitly.
    """

    def wrap(fn: Evaluator) -> DocumentedCallable:
        return DocumentedCallable(doc=doc, fn=fn)

    return wrap
