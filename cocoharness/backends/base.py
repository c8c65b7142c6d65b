"""
Abstract interface for evaluator backends.

A backend owns the native side of a benchmark run: suites, observers and
problems, all referred to by Handle values. The harness classes (Suite,
Observer, Problem, Benchmark) only ever talk to a backend through this
interface.

Backends:
- reference: Pure numpy test functions following COCO conventions
- cocoex: The COCO experimentation package
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .handles import Handle


class EvaluatorBackend(ABC):
    """
    Abstract evaluator backend.

    Metadata getters take a problem handle. Evaluation counters, the final
    target flag and the largest f-values of interest are live reads; callers
    must not cache them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., 'reference', 'cocoex')."""
        pass

    @classmethod
    def is_available(cls) -> bool:
        """Check if this backend's dependencies are installed."""
        return True

    # Global

    @abstractmethod
    def set_log_level(self, level: str) -> None:
        """Set process-wide logging verbosity ('error', 'warning', 'info', 'debug')."""
        pass

    @abstractmethod
    def list_suites(self) -> List[str]:
        """Names of the suites this backend recognizes."""
        pass

    @abstractmethod
    def list_observers(self) -> List[str]:
        """Names of the observers this backend recognizes."""
        pass

    # Observer

    @abstractmethod
    def get_observer(self, name: str, options: str) -> Handle:
        """
        Acquire an observer.

        Raises:
            ConfigurationError: Unrecognized name or options
            ResourceError: Acquisition failed otherwise
        """
        pass

    @abstractmethod
    def finalize_observer(self, observer: Handle) -> None:
        """Release an observer and invalidate the problems bound to it."""
        pass

    # Suite

    @abstractmethod
    def get_suite(self, name: str, instance: str, options: str) -> Handle:
        """
        Acquire a suite.

        Raises:
            ConfigurationError: Unrecognized name, instance or options
            ResourceError: Acquisition failed otherwise
        """
        pass

    @abstractmethod
    def finalize_suite(self, suite: Handle) -> None:
        """Release a suite and invalidate every problem obtained from it."""
        pass

    @abstractmethod
    def suite_size(self, suite: Handle) -> int:
        """Number of problems in a suite."""
        pass

    # Problems

    @abstractmethod
    def next_problem(self, suite: Handle, observer: Handle) -> Optional[Handle]:
        """
        Advance the sequential cursor of a suite.

        Returns:
            Handle of the next problem bound to the observer, or None once the
            suite is exhausted
        """
        pass

    @abstractmethod
    def problem_at(self, suite: Handle, index: int) -> Handle:
        """
        Fetch a problem by ordinal, independently of the cursor.

        Raises:
            ProblemIndexError: If index is out of range
        """
        pass

    # Evaluation

    @abstractmethod
    def evaluate_function(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        """Evaluate the objectives; increments the evaluation counter."""
        pass

    @abstractmethod
    def evaluate_constraint(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        """Evaluate the constraints; increments the constraint counter."""
        pass

    # Metadata

    @abstractmethod
    def dimension(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def number_of_objectives(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def number_of_constraints(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def lower_bounds(self, problem: Handle) -> np.ndarray:
        pass

    @abstractmethod
    def upper_bounds(self, problem: Handle) -> np.ndarray:
        pass

    @abstractmethod
    def number_of_integer_variables(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def problem_id(self, problem: Handle) -> str:
        pass

    @abstractmethod
    def problem_name(self, problem: Handle) -> str:
        pass

    @abstractmethod
    def problem_index(self, problem: Handle) -> int:
        pass

    # Live values

    @abstractmethod
    def evaluations(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def evaluations_constraints(self, problem: Handle) -> int:
        pass

    @abstractmethod
    def final_target_hit(self, problem: Handle) -> bool:
        pass

    @abstractmethod
    def largest_fvalues_of_interest(self, problem: Handle) -> np.ndarray:
        pass

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
