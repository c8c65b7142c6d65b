"""
Error taxonomy for the benchmark harness.

Every error carries:
- kind: ErrorKind classifying the failure
- operation: Name of the operation that failed (one line of context)
- original_error: The underlying cause (also chained via ``raise ... from``)

Each layer (observer, suite, problem, benchmark) wraps the cause it receives
with its own operation name and re-raises; nothing is retried.
"""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Classification of harness failures."""

    CONFIGURATION = "configuration"
    RESOURCE = "resource"
    CONSTRUCTION = "construction"
    INVALID_ARGUMENT = "invalid_argument"
    INDEX = "index"
    LIFECYCLE = "lifecycle"
    ITERATION = "iteration"
    FINALIZATION = "finalization"


class HarnessError(Exception):
    """Base class for all harness errors."""

    kind: ErrorKind = ErrorKind.RESOURCE

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.operation = operation
        self.original_error = original_error
        super().__init__(message)

    def __str__(self) -> str:
        if self.original_error is None:
            return self.message
        return f"{self.message}\n{self.original_error}"

    def root_cause(self) -> BaseException:
        """Follow the chain of original errors down to the first cause."""
        error: BaseException = self
        while isinstance(error, HarnessError) and error.original_error is not None:
            error = error.original_error
        return error


class ConfigurationError(HarnessError):
    """Unrecognized name or options at construction."""

    kind = ErrorKind.CONFIGURATION


class ResourceError(HarnessError):
    """Acquisition or release failure at the backend."""

    kind = ErrorKind.RESOURCE


class ConstructionError(HarnessError):
    """Problem metadata snapshot failed."""

    kind = ErrorKind.CONSTRUCTION


class InvalidArgumentError(HarnessError, ValueError):
    """Vector length mismatch on evaluation calls."""

    kind = ErrorKind.INVALID_ARGUMENT


class ProblemIndexError(HarnessError, IndexError):
    """Indexed problem lookup out of range."""

    kind = ErrorKind.INDEX


class LifecycleError(HarnessError, RuntimeError):
    """Operation invoked outside its valid state (double finalize, use after finalize)."""

    kind = ErrorKind.LIFECYCLE


class IterationError(HarnessError):
    """Fetching the next problem of a benchmark failed."""

    kind = ErrorKind.ITERATION


class FinalizationError(HarnessError):
    """
    Benchmark finalization failed.

    Aggregates every failure collected while finalizing the observer and
    the suite, in the order they happened.
    """

    kind = ErrorKind.FINALIZATION

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[BaseException] = None,
        errors: Optional[List[BaseException]] = None,
    ):
        self.errors = list(errors or [])
        if original_error is None and self.errors:
            original_error = self.errors[0]
        super().__init__(message, operation=operation, original_error=original_error)

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        details = "\n".join(str(error) for error in self.errors)
        return f"{self.message}\n{details}"


def wrap_error(operation: str, message: str, error: BaseException) -> HarnessError:
    """
    Add one line of context to an error, keeping its kind.

    Harness errors are re-created as the same class; anything else coming
    out of a backend is treated as a resource fault.

    Args:
        operation: Name of the failing operation
        message: Context line for this layer
        error: Underlying cause

    Returns:
        New error to raise ``from`` the cause
    """
    if isinstance(error, FinalizationError):
        return FinalizationError(message, operation=operation, original_error=error, errors=error.errors)
    if isinstance(error, HarnessError):
        return type(error)(message, operation=operation, original_error=error)
    return ResourceError(message, operation=operation, original_error=error)
