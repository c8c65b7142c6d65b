"""
Tests for the error taxonomy.
"""

from cocoharness.exceptions import (
    ConfigurationError,
    ErrorKind,
    FinalizationError,
    HarnessError,
    InvalidArgumentError,
    LifecycleError,
    ProblemIndexError,
    ResourceError,
    wrap_error,
)


class TestErrors:

    def test_kinds(self):
        assert ConfigurationError("x").kind == ErrorKind.CONFIGURATION
        assert ProblemIndexError("x").kind == ErrorKind.INDEX
        assert isinstance(ProblemIndexError("x"), IndexError)
        assert isinstance(InvalidArgumentError("x"), ValueError)
        assert isinstance(LifecycleError("x"), RuntimeError)

    def test_str_includes_cause(self):
        error = ResourceError("Suite constructor failed.", original_error=OSError("disk full"))
        assert str(error) == "Suite constructor failed.\ndisk full"

    def test_wrap_keeps_kind(self):
        cause = ConfigurationError("Unknown suite 'x'")
        wrapped = wrap_error("suite.construct", "Suite constructor failed.", cause)

        assert type(wrapped) is ConfigurationError
        assert wrapped.operation == "suite.construct"
        assert wrapped.original_error is cause
        assert wrapped.root_cause() is cause

    def test_wrap_foreign_error(self):
        cause = KeyError("slot")
        wrapped = wrap_error("observer.finalize", "Observer finalization failed.", cause)

        assert isinstance(wrapped, ResourceError)
        assert wrapped.root_cause() is cause

    def test_wrap_finalization_keeps_errors(self):
        errors = [OSError("a"), OSError("b")]
        wrapped = wrap_error("outer", "Outer.", FinalizationError("Inner.", errors=errors))

        assert isinstance(wrapped, FinalizationError)
        assert wrapped.errors == errors

    def test_finalization_error(self):
        errors = [ResourceError("first"), ResourceError("second")]
        error = FinalizationError("Benchmark finalization failed.", errors=errors)

        assert error.original_error is errors[0]
        assert str(error) == "Benchmark finalization failed.\nfirst\nsecond"
        assert isinstance(error, HarnessError)
