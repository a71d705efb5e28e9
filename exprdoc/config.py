"""Settings read from the environment (and a ``.env`` file).

    EXPRDOC_ARTIFACT_DIR      artifact root, default docs/reference
    EXPRDOC_REPOSITORY        repository name written to the manifest
    EXPRDOC_EXAMPLE_TIMEOUT   per-example budget in seconds, default 5
    EXPRDOC_STRICT            treat warnings (e.g. no examples) as failures
    EXPRDOC_FAILURE_MATCH     "kind" or "kind_and_message" (default)
    EXPRDOC_WORKERS           validation pool size, default CPU count
    EXPRDOC_LOG_LEVEL         logging level name, default WARNING

Command-line flags override every value.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .executor import DEFAULT_TIMEOUT
from .result import Err, Ok, Result
from .validate import FailureMatch

DEFAULT_ARTIFACT_DIR = Path("docs/reference")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    artifact_dir: Path = DEFAULT_ARTIFACT_DIR
    repository: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    strict: bool = False
    failure_match: FailureMatch = FailureMatch.KIND_AND_MESSAGE
    workers: int | None = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Result["Settings", ValueError]:
        """Creates settings from EXPRDOC_* variables, loading .env first."""
        load_dotenv()
        try:
            return Ok(
                cls(
                    artifact_dir=Path(os.getenv("EXPRDOC_ARTIFACT_DIR") or DEFAULT_ARTIFACT_DIR),
                    repository=os.getenv("EXPRDOC_REPOSITORY") or None,
                    timeout=_positive_float("EXPRDOC_EXAMPLE_TIMEOUT", DEFAULT_TIMEOUT),
                    strict=_bool("EXPRDOC_STRICT"),
                    failure_match=_failure_match(),
                    workers=_workers(),
                    log_level=_log_level(),
                )
            )
        except ValueError as e:
            return Err(e)


def _positive_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive finite number, got {raw!r}")
    return value


def _bool(name: str) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _failure_match() -> FailureMatch:
    raw = (os.getenv("EXPRDOC_FAILURE_MATCH") or "").strip().lower()
    if not raw:
        return FailureMatch.KIND_AND_MESSAGE
    try:
        return FailureMatch(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in FailureMatch)
        raise ValueError(
            f"EXPRDOC_FAILURE_MATCH must be one of {allowed}, got {raw!r}"
        ) from None


def _workers() -> int | None:
    raw = (os.getenv("EXPRDOC_WORKERS") or "").strip()
    if not raw:
        return None
    if not raw.isdigit() or int(raw) < 1:
        raise ValueError(f"EXPRDOC_WORKERS must be a positive integer, got {raw!r}")
    return int(raw)


def _log_level() -> str:
    raw = (os.getenv("EXPRDOC_LOG_LEVEL") or "WARNING").strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        raise ValueError(f"EXPRDOC_LOG_LEVEL is not a logging level: {raw!r}")
    return raw
