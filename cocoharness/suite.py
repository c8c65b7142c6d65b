"""
Suite: an ordered, named collection of benchmark problems.
"""

from typing import Optional
import logging

from .backends import EvaluatorBackend, Handle
from .exceptions import LifecycleError, wrap_error
from .observer import Observer
from .problem import Problem

logger = logging.getLogger(__name__)


class Suite:
    """
    Problem collection acquired from the evaluator backend.

    Sequential retrieval (get_next_problem) walks the problems in suite order
    and yields None once exhausted; indexed retrieval (get_problem) is
    independent of that cursor. Finalizing the suite invalidates every
    Problem obtained from it.

    Example:
        suite = Suite("bbob", "year: 2018", "dimensions: 2,3")
        problem = suite.get_next_problem(observer)
        ...
        suite.finalize()
    """

    def __init__(
        self,
        name: str,
        instance: str = "",
        options: str = "",
        backend: Optional[EvaluatorBackend] = None,
    ):
        """
        Acquire the suite.

        Args:
            name: Suite name (e.g. "bbob", "bbob-mixint")
            instance: Instance selector (e.g. "year: 2018")
            options: COCO-style option string (e.g. "dimensions: 2,3")
            backend: Evaluator backend (defaults to the process-wide one)

        Raises:
            ConfigurationError: Unrecognized name, instance or options
            ResourceError: Acquisition failed otherwise
        """
        if backend is None:
            from .runtime import get_backend
            backend = get_backend()

        self.backend = backend
        self.name = name
        self.instance = instance
        self.options = options
        self._finalized = False

        try:
            self.handle: Handle = backend.get_suite(name, instance, options)
        except Exception as e:
            raise wrap_error("suite.construct", "Suite constructor failed.", e) from e
        logger.debug(f"Suite {name} acquired ({self.handle})")

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _ensure_open(self, operation: str) -> None:
        if self._finalized:
            raise LifecycleError(f"Suite {self.name} already finalized", operation=operation)

    def get_next_problem(self, observer: Observer) -> Optional[Problem]:
        """
        Return the next problem in suite order, bound to the observer.

        Args:
            observer: Observer logging the evaluations of the problem

        Returns:
            Next Problem, or None when the suite is exhausted

        Raises:
            LifecycleError: If the suite was finalized
        """
        self._ensure_open("suite.get_next_problem")
        try:
            handle = self.backend.next_problem(self.handle, observer.handle)
            if handle is None:
                logger.debug(f"Suite {self.name} exhausted")
                return None
            return Problem(self.backend, handle)
        except Exception as e:
            raise wrap_error("suite.get_next_problem", "Fetching of next problem failed.", e) from e

    def get_problem(self, index: int) -> Problem:
        """
        Return the problem at a 0-based ordinal, without moving the cursor.

        Raises:
            ProblemIndexError: If index is out of range
            LifecycleError: If the suite was finalized
        """
        self._ensure_open("suite.get_problem")
        try:
            return Problem(self.backend, self.backend.problem_at(self.handle, index))
        except Exception as e:
            raise wrap_error("suite.get_problem", f"Fetching of problem {index} failed.", e) from e

    def __len__(self) -> int:
        self._ensure_open("suite.len")
        return self.backend.suite_size(self.handle)

    def finalize(self) -> None:
        """
        Release the suite.

        Raises:
            LifecycleError: If already finalized
            ResourceError: If the backend fails to release it
        """
        self._ensure_open("suite.finalize")
        self._finalized = True
        try:
            self.backend.finalize_suite(self.handle)
        except Exception as e:
            raise wrap_error("suite.finalize", "Suite finalization failed.", e) from e
        logger.debug(f"Suite {self.name} finalized")

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return (
            f"Suite(name={self.name!r}, instance={self.instance!r}, "
            f"options={self.options!r}, finalized={self._finalized})"
        )
