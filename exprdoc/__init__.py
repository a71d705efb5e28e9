"""exprdoc: Documentation metadata, example validation and drift checking for expression-language functions."""

from .errors import (
    DuplicateIdentifier,
    ExprDocError,
    ExpressionError,
    IncompleteMetadata,
    MalformedArtifact,
    MissingArtifact,
)
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
from .result import Err, Ok, Result
from .registry import (
    DocumentedFunction,
    FunctionRegistry,
    RegistryEntry,
    documented,
)
from .helpers import (
    example,
    fails,
    function_doc,
    optional,
    param,
    returns,
)
from .executor import ExampleExecutor, ExecutionOutcome, OutcomeStatus
from .validate import (
    FailureMatch,
    Reason,
    Severity,
    ValidationReport,
    Validator,
    validate_all,
)
from .serialization import artifact_filename, generate, parse_artifact
from .consistency import ArtifactStatus, ConsistencyReport, check, write
from .aggregate import DocCollection, aggregate

__all__ = [
    # Errors
    "DuplicateIdentifier",
    "ExprDocError",
    "ExpressionError",
    "IncompleteMetadata",
    "MalformedArtifact",
    "MissingArtifact",
    # Model
    "Category",
    "EnumVariant",
    "Example",
    "Failure",
    "FunctionDoc",
    "Parameter",
    "ReturnSpec",
    "is_complete",
    "Err",
    "Ok",
    "Result",
    # Registry
    "DocumentedFunction",
    "FunctionRegistry",
    "RegistryEntry",
    "documented",
    # Helpers
    "example",
    "fails",
    "function_doc",
    "optional",
    "param",
    "returns",
    # Validation
    "ExampleExecutor",
    "ExecutionOutcome",
    "OutcomeStatus",
    "FailureMatch",
    "Reason",
    "Severity",
    "ValidationReport",
    "Validator",
    "validate_all",
    # Artifacts
    "artifact_filename",
    "generate",
    "parse_artifact",
    "ArtifactStatus",
    "ConsistencyReport",
    "check",
    "write",
    "DocCollection",
    "aggregate",
]
