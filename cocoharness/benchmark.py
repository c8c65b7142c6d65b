"""
Benchmark: drives one suite with one observer.

States:
    NOT_STARTED -> ITERATING -> FINISHED

get_next_problem() is valid until the benchmark is finalized. Reaching the
end of the suite does not finish the benchmark; finalize_benchmark() must
be called explicitly so the observer can log the last results.
"""

from enum import Enum
from typing import Iterator, List, Optional
import logging

from .exceptions import FinalizationError, IterationError, LifecycleError
from .observer import Observer
from .problem import Problem
from .suite import Suite

logger = logging.getLogger(__name__)


class BenchmarkState(str, Enum):
    """Lifecycle states of a benchmark run."""

    NOT_STARTED = "not_started"
    ITERATING = "iterating"
    FINISHED = "finished"


class Benchmark:
    """
    Composition of a suite and an observer.

    The benchmark owns both for the duration of the run and finalizes them,
    observer first, in finalize_benchmark().

    Example:
        benchmark = Benchmark(Suite("bbob", "", "dimensions: 2"), Observer("bbob", ""))
        problem = benchmark.get_next_problem()
        while problem is not None:
            solve(problem)
            problem = benchmark.get_next_problem()
        benchmark.finalize_benchmark()
    """

    def __init__(self, suite: Suite, observer: Observer):
        self.suite = suite
        self.observer = observer
        self.state = BenchmarkState.NOT_STARTED

    def get_next_problem(self) -> Optional[Problem]:
        """
        Return the next problem in the suite, or None at the end of the suite.

        Raises:
            LifecycleError: If the benchmark was finalized
            IterationError: If the suite fails to produce the problem
        """
        if self.state == BenchmarkState.FINISHED:
            raise LifecycleError("Benchmark already finalized", operation="benchmark.get_next_problem")

        self.state = BenchmarkState.ITERATING
        try:
            problem = self.suite.get_next_problem(self.observer)
        except Exception as e:
            raise IterationError(
                "Fetching of next problem failed.",
                operation="benchmark.get_next_problem",
                original_error=e,
            ) from e

        if problem is not None:
            logger.debug(f"Next problem: {problem.id}")
        return problem

    def __iter__(self) -> Iterator[Problem]:
        """Iterate over the remaining problems until the suite is exhausted."""
        return iter(self.get_next_problem, None)

    def finalize_benchmark(self) -> None:
        """
        Finalize the observer, then the suite.

        The suite is finalized even when the observer fails; every failure
        is reported in a single FinalizationError.

        Raises:
            LifecycleError: If the benchmark was already finalized
            FinalizationError: If finalizing the observer or suite failed
        """
        if self.state == BenchmarkState.FINISHED:
            raise LifecycleError("Benchmark already finalized", operation="benchmark.finalize_benchmark")
        self.state = BenchmarkState.FINISHED

        errors: List[BaseException] = []
        for component in (self.observer, self.suite):
            try:
                component.finalize()
            except Exception as e:
                logger.error(f"Finalizing {component!r} failed: {e}")
                errors.append(e)

        if errors:
            raise FinalizationError(
                "Benchmark finalization failed.",
                operation="benchmark.finalize_benchmark",
                errors=errors,
            ) from errors[0]
        logger.info(f"Benchmark on suite {self.suite.name} finalized")

    def __enter__(self) -> "Benchmark":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.state == BenchmarkState.FINISHED:
            return
        if exc_type is None:
            self.finalize_benchmark()
            return
        # the body's exception takes precedence
        try:
            self.finalize_benchmark()
        except FinalizationError as e:
            logger.error(f"Finalization after failed run also failed: {e}")
