"""Runs one documented example and captures what actually happened.

The executor never raises for a misbehaving example. Every run ends in one
ExecutionOutcome:

    COMPLETED       the evaluator returned Ok(value) or Err(Failure)
    DID_NOT_PARSE   the source does not parse or does not compile
    TIMED_OUT       evaluation exceeded the per-example time budget
    SKIPPED         the example depends on host state and was not run
    INTERNAL        the evaluator raised instead of returning a result
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .model import Example, Failure
from .registry import RegistryEntry
from .result import Err, Ok, Result
from .values import Value

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

Evaluate = Callable[[str, Value], Result[Value, Failure]]


class OutcomeStatus(Enum):
    COMPLETED = "completed"
    DID_NOT_PARSE = "did_not_parse"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ExecutionOutcome:
    status: OutcomeStatus
    result: Ok[Value] | Err[Failure] | None = None
    detail: str | None = None


class ExampleExecutor:
    """Evaluates examples through ``evaluate(source, bindings)``.

    Each example runs on its own daemon thread and is abandoned once
    ``timeout`` seconds pass, so a runaway function cannot hang a CI run.
    """

    def __init__(self, evaluate: Evaluate, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.evaluate = evaluate
        self.timeout = timeout

    def run(self, entry: RegistryEntry, example: Example) -> ExecutionOutcome:
        if example.requires_host:
            logger.debug("Skipping host-dependent example of %r", entry.identifier)
            return ExecutionOutcome(
                OutcomeStatus.SKIPPED, detail="example depends on host runtime state"
            )

        box: dict[str, Any] = {}

        def target() -> None:
            try:
                box["result"] = self.evaluate(example.source, example.input)
            except Exception as e:  # reported as an internal outcome
                box["error"] = e

        worker = threading.Thread(
            target=target, name=f"example-{entry.identifier}", daemon=True
        )
        worker.start()
        worker.join(self.timeout)

        if worker.is_alive():
            logger.warning(
                "Example of %r exceeded %.1fs budget", entry.identifier, self.timeout
            )
            return ExecutionOutcome(
                OutcomeStatus.TIMED_OUT,
                detail=f"evaluation did not finish within {self.timeout:g}s",
            )
        if "error" in box:
            e = box["error"]
            return ExecutionOutcome(
                OutcomeStatus.INTERNAL, detail=f"{type(e).__name__}: {e}"
            )

        result = box["result"]
        match result:
            case Err(Failure(kind="parse" | "compile", message=message)):
                return ExecutionOutcome(OutcomeStatus.DID_NOT_PARSE, result, message)
            case Ok(_) | Err(Failure()):
                return ExecutionOutcome(OutcomeStatus.COMPLETED, result)
            case _:
                return ExecutionOutcome(
                    OutcomeStatus.INTERNAL,
                    detail=f"evaluator returned {type(result).__name__}, expected Ok or Err",
                )
