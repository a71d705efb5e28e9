"""A small reference implementation of the expression language.

The documentation engine only needs an ``evaluate(source, bindings)``
callable; ``Runtime(registry).evaluate`` is the one shipped here.
"""

from .nodes import Call, Program, iter_calls
from .parser import parse
from .runtime import Runtime

__all__ = ["Call", "Program", "Runtime", "iter_calls", "parse"]
