"""Result type for operations that can fail.

Expected failures (an incomplete doc, an example that evaluates to an
error, a bad environment variable) travel as ``Err`` values and are
inspected with ``match``. Exceptions are reserved for broken contracts.
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False


Result: TypeAlias = Ok[T] | Err[E]
