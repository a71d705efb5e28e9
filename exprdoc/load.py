from __future__ import annotations

import importlib

from .registry import FunctionRegistry

DEFAULT_REGISTRY = "exprdoc.stdlib:build_registry"


def load_registry(target: str = DEFAULT_REGISTRY) -> FunctionRegistry | str:
    """Import ``module:attribute`` and return the FunctionRegistry it names.

    ``attribute`` may be a registry or a zero-argument factory returning
    one. Returns the registry on success, or an error string on any
    failure. Registration errors (IncompleteMetadata, DuplicateIdentifier)
    raised by the factory propagate: they are fatal at startup.
    """
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        return f"Registry must be given as 'module:attribute', got {target!r}"

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        return f"Could not import {module_name!r}: {e}"

    obj = getattr(module, attr, None)
    if obj is None:
        return f"Module {module_name!r} has no attribute {attr!r}"

    if callable(obj) and not isinstance(obj, FunctionRegistry):
        obj = obj()

    if not isinstance(obj, FunctionRegistry):
        return f"{target} did not produce a FunctionRegistry (got {type(obj).__name__})"
    return obj
