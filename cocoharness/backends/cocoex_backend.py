"""
cocoex evaluator backend.

Wraps the COCO experimentation package (``pip install coco-experiment``),
mapping its Suite/Observer/Problem objects into handles. The package is
only imported when the backend is constructed.
"""

from typing import Any, List, Optional, Set
import importlib
import logging

import numpy as np

from ..exceptions import ConfigurationError, ProblemIndexError, ResourceError
from .base import EvaluatorBackend
from .handles import Handle, HandleArena

logger = logging.getLogger(__name__)

OBSERVERS = ("bbob", "bbob-biobj", "toy", "rw", "no_observer")
LOG_LEVELS = ("error", "warning", "info", "debug")


class _CocoSuite:
    def __init__(self, suite: Any):
        self.suite = suite
        self.current: Optional[Handle] = None
        self.problems: List[Handle] = []


class _CocoObserver:
    def __init__(self, observer: Any, name: str):
        self.observer = observer
        self.name = name
        self.problems: List[Handle] = []


class CocoexBackend(EvaluatorBackend):
    """
    Evaluator backend delegating to cocoex.

    cocoex frees the previously yielded problem when the suite advances;
    the handle arena mirrors that so stale problems are caught here instead
    of inside the native library.
    """

    def __init__(self):
        try:
            self._cocoex = importlib.import_module("cocoex")
        except ImportError as e:
            raise ResourceError(
                "cocoex is not installed. Install coco-experiment to use the cocoex backend.",
                operation="attach",
                original_error=e,
            ) from e
        self._suites: HandleArena[_CocoSuite] = HandleArena("suite")
        self._observers: HandleArena[_CocoObserver] = HandleArena("observer")
        self._problems: HandleArena[Any] = HandleArena("problem")
        self._indexed: Set[Handle] = set()

    @property
    def name(self) -> str:
        return "cocoex"

    @classmethod
    def is_available(cls) -> bool:
        try:
            import cocoex
            return True
        except ImportError:
            return False

    def set_log_level(self, level: str) -> None:
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level '{level}'. Supported: {list(LOG_LEVELS)}")
        self._cocoex.log_level(level)

    def list_suites(self) -> List[str]:
        return list(self._cocoex.known_suite_names)

    def list_observers(self) -> List[str]:
        return list(OBSERVERS)

    # Observer

    def get_observer(self, name: str, options: str) -> Handle:
        if name not in OBSERVERS:
            raise ConfigurationError(f"Unknown observer '{name}'. Available: {list(OBSERVERS)}")
        try:
            observer = self._cocoex.Observer(name, options)
        except Exception as e:
            raise ConfigurationError(f"cocoex rejected observer '{name}'", original_error=e) from e
        return self._observers.insert(_CocoObserver(observer, name))

    def finalize_observer(self, observer: Handle) -> None:
        resource = self._observers.remove(observer)
        for problem in resource.problems:
            self._release_problem(problem)
        # Observer.free() is broken in cocoex; the C observer is released on collection
        resource.observer = None
        logger.debug(f"Released cocoex observer {resource.name}")

    # Suite

    def get_suite(self, name: str, instance: str, options: str) -> Handle:
        if name not in self._cocoex.known_suite_names:
            raise ConfigurationError(
                f"Unknown suite '{name}'. Available: {list(self._cocoex.known_suite_names)}"
            )
        try:
            suite = self._cocoex.Suite(name, instance, options)
        except Exception as e:
            raise ConfigurationError(f"cocoex rejected suite '{name}'", original_error=e) from e
        logger.debug(f"Acquired cocoex suite {name} with {len(suite)} problems")
        return self._suites.insert(_CocoSuite(suite))

    def finalize_suite(self, suite: Handle) -> None:
        resource = self._suites.remove(suite)
        for problem in resource.problems:
            self._release_problem(problem)
        try:
            resource.suite.free()
        except Exception as e:
            raise ResourceError("cocoex failed to free suite", original_error=e) from e

    def suite_size(self, suite: Handle) -> int:
        return len(self._suites.get(suite).suite)

    # Problems

    def next_problem(self, suite: Handle, observer: Handle) -> Optional[Handle]:
        resource = self._suites.get(suite)
        bound = self._observers.get(observer)
        if resource.current is not None:
            self._release_problem(resource.current)
            resource.current = None

        problem = resource.suite.next_problem(bound.observer)
        if problem is None:
            return None
        handle = self._problems.insert(problem)
        resource.problems.append(handle)
        bound.problems.append(handle)
        resource.current = handle
        return handle

    def problem_at(self, suite: Handle, index: int) -> Handle:
        resource = self._suites.get(suite)
        if not 0 <= index < len(resource.suite):
            raise ProblemIndexError(
                f"Problem index {index} out of range for suite with {len(resource.suite)} problems"
            )
        handle = self._problems.insert(resource.suite.get_problem(index))
        resource.problems.append(handle)
        self._indexed.add(handle)
        return handle

    def _release_problem(self, problem: Handle) -> None:
        if problem not in self._problems:
            return
        native = self._problems.remove(problem)
        # sequential problems belong to the suite, indexed ones to the caller
        if problem in self._indexed:
            self._indexed.discard(problem)
            native.free()

    # Evaluation

    def evaluate_function(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        return np.atleast_1d(np.asarray(self._problems.get(problem)(x), dtype=float))

    def evaluate_constraint(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        return np.atleast_1d(np.asarray(self._problems.get(problem).constraint(x), dtype=float))

    # Metadata

    def dimension(self, problem: Handle) -> int:
        return int(self._problems.get(problem).dimension)

    def number_of_objectives(self, problem: Handle) -> int:
        return int(self._problems.get(problem).number_of_objectives)

    def number_of_constraints(self, problem: Handle) -> int:
        return int(self._problems.get(problem).number_of_constraints)

    def lower_bounds(self, problem: Handle) -> np.ndarray:
        return np.array(self._problems.get(problem).lower_bounds, dtype=float)

    def upper_bounds(self, problem: Handle) -> np.ndarray:
        return np.array(self._problems.get(problem).upper_bounds, dtype=float)

    def number_of_integer_variables(self, problem: Handle) -> int:
        return int(self._problems.get(problem).number_of_integer_variables)

    def problem_id(self, problem: Handle) -> str:
        return str(self._problems.get(problem).id)

    def problem_name(self, problem: Handle) -> str:
        return str(self._problems.get(problem).name)

    def problem_index(self, problem: Handle) -> int:
        return int(self._problems.get(problem).index)

    # Live values

    def evaluations(self, problem: Handle) -> int:
        return int(self._problems.get(problem).evaluations)

    def evaluations_constraints(self, problem: Handle) -> int:
        return int(self._problems.get(problem).evaluations_constraints)

    def final_target_hit(self, problem: Handle) -> bool:
        return bool(self._problems.get(problem).final_target_hit)

    def largest_fvalues_of_interest(self, problem: Handle) -> np.ndarray:
        return np.array(self._problems.get(problem).largest_fvalues_of_interest, dtype=float)
