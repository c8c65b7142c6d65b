"""
Reference evaluator backend.

Pure numpy implementation of the evaluator interface, following COCO
conventions so the harness can run (and be tested) without a native
library:

- Suites: bbob, bbob-mixint, bbob-constrained, bbob-biobj
- Problems ordered by dimension, then function, then instance
- One active sequential problem per suite: fetching the next problem frees
  the previous one
- Finalizing a suite or observer invalidates the problems tied to it
"""

from dataclasses import dataclass
from itertools import combinations_with_replacement
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np

from ..exceptions import ConfigurationError, InvalidArgumentError, ProblemIndexError
from ..options import parse_int_list, parse_options
from .analytical import FUNCTIONS, get_analytical_function, instance_rng
from .base import EvaluatorBackend
from .handles import Handle, HandleArena

logger = logging.getLogger(__name__)

FINAL_TARGET_PRECISION = 1e-8
INTEGER_ARITIES = (2, 4, 8, 16)
CONSTRAINT_COUNTS = (1, 2, 6)

LOG_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

BIOBJ_PAIRS: Dict[int, Tuple[int, int]] = {
    number: pair
    for number, pair in enumerate(combinations_with_replacement(sorted(FUNCTIONS), 2), start=1)
}


@dataclass(frozen=True)
class SuiteDefinition:
    """Static description of a reference suite."""

    name: str
    kind: str  # "single", "mixint", "constrained", "biobj"
    functions: Tuple[int, ...]
    dimensions: Tuple[int, ...]


SUITES: Dict[str, SuiteDefinition] = {
    "bbob": SuiteDefinition("bbob", "single", tuple(sorted(FUNCTIONS)), (2, 3, 5, 10, 20, 40)),
    "bbob-mixint": SuiteDefinition("bbob-mixint", "mixint", tuple(sorted(FUNCTIONS)), (5, 10, 20, 40, 80, 160)),
    "bbob-constrained": SuiteDefinition(
        "bbob-constrained", "constrained", tuple(sorted(FUNCTIONS)), (2, 3, 5, 10, 20, 40)
    ),
    "bbob-biobj": SuiteDefinition("bbob-biobj", "biobj", tuple(sorted(BIOBJ_PAIRS)), (2, 3, 5, 10, 20, 40)),
}

OBSERVERS = ("bbob", "bbob-biobj", "bbob-constrained", "bbob-mixint", "toy", "no_observer")
OBSERVER_OPTIONS = ("result_folder", "algorithm_name", "algorithm_info", "target_precision")
SUITE_INSTANCE_OPTIONS = ("year", "instances")
SUITE_OPTIONS = ("dimensions", "function_indices", "instance_indices")


@dataclass(frozen=True)
class ProblemSpec:
    """One entry of a suite's problem catalogue."""

    function: int
    dimension: int
    instance: int
    index: int


@dataclass
class ObserverRecord:
    """What an observer saw of one problem."""

    problem_id: str
    dimension: int
    evaluations: int = 0
    best_f: Optional[np.ndarray] = None
    target_hit: bool = False


class ReferenceObserver:
    """In-memory logging attachment."""

    def __init__(self, name: str, options: Dict[str, str]):
        self.name = name
        self.options = options
        self.target_precision = float(options.get("target_precision", FINAL_TARGET_PRECISION))
        self.records: Dict[str, ObserverRecord] = {}
        self.problems: List[Handle] = []

    @property
    def active(self) -> bool:
        return self.name != "no_observer"

    def observe(self, problem: "ReferenceProblem", values: np.ndarray, feasible: bool = True) -> None:
        """Record one objective evaluation. Infeasible values count as evaluations only."""
        if not self.active:
            return
        record = self.records.get(problem.id)
        if record is None:
            record = ObserverRecord(problem_id=problem.id, dimension=problem.dimension)
            self.records[problem.id] = record
        record.evaluations += 1
        if not feasible:
            return
        record.best_f = values.copy() if record.best_f is None else np.minimum(record.best_f, values)

        if not record.target_hit and np.all(record.best_f - problem.ideal < self.target_precision):
            record.target_hit = True
            logger.info(
                f"[{self.name}] {problem.id}: target {self.target_precision:.0e} "
                f"reached after {record.evaluations} evaluations"
            )


class ReferenceSuite:
    """Catalogue of problems plus the sequential cursor."""

    def __init__(self, definition: SuiteDefinition, instance: str, options: str, specs: List[ProblemSpec]):
        self.definition = definition
        self.instance = instance
        self.options = options
        self.specs = specs
        self.cursor = 0
        self.current: Optional[Handle] = None
        self.problems: List[Handle] = []

    @property
    def name(self) -> str:
        return self.definition.name


class ReferenceProblem:
    """
    One problem instance: objectives, constraints, bounds and counters.
    """

    def __init__(
        self,
        definition: SuiteDefinition,
        spec: ProblemSpec,
        suite: Handle,
        observer: Optional[Handle],
    ):
        self.spec = spec
        self.suite = suite
        self.observer = observer
        self.kind = definition.kind
        self.dimension = spec.dimension
        self.index = spec.index

        d = spec.dimension
        self.number_of_integer_variables = 0
        self.constraint_matrix: Optional[np.ndarray] = None

        if self.kind == "mixint":
            self.lower, self.upper, xopt = self._mixint_layout(spec)
            self.number_of_integer_variables = d - d // 5
            self.objectives = [get_analytical_function(spec.function, d, spec.instance, xopt=xopt)]
        elif self.kind == "biobj":
            first, second = BIOBJ_PAIRS[spec.function]
            self.lower, self.upper = np.full(d, -5.0), np.full(d, 5.0)
            self.objectives = [
                get_analytical_function(first, d, 2 * spec.instance + 1),
                get_analytical_function(second, d, 2 * spec.instance + 2),
            ]
        else:
            self.lower, self.upper = np.full(d, -5.0), np.full(d, 5.0)
            self.objectives = [get_analytical_function(spec.function, d, spec.instance)]
            if self.kind == "constrained":
                count = CONSTRAINT_COUNTS[(spec.instance - 1) % len(CONSTRAINT_COUNTS)]
                rng = instance_rng(spec.function, d, spec.instance, salt=1)
                matrix = rng.standard_normal((count, d))
                self.constraint_matrix = matrix / np.linalg.norm(matrix, axis=1, keepdims=True)

        self.ideal = np.array([f.fopt for f in self.objectives])
        self.evaluations = 0
        self.evaluations_constraints = 0
        self.best_f: Optional[np.ndarray] = None
        self.final_target_hit = False
        self.last_feasible = True

    @staticmethod
    def _mixint_layout(spec: ProblemSpec) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Integer blocks of arity 2, 4, 8, 16 first, continuous block last."""
        d = spec.dimension
        block = d // 5
        lower = np.full(d, -5.0)
        upper = np.full(d, 5.0)
        rng = instance_rng(spec.function, d, spec.instance, salt=2)
        xopt = np.round(rng.uniform(-4.0, 4.0, size=d), 4)
        for position, arity in enumerate(INTEGER_ARITIES):
            start, stop = position * block, (position + 1) * block
            lower[start:stop] = 0.0
            upper[start:stop] = arity - 1
            xopt[start:stop] = rng.integers(0, arity, size=block)
        return lower, upper, xopt

    @property
    def id(self) -> str:
        suite = {"single": "bbob", "mixint": "bbob-mixint", "constrained": "bbob-constrained", "biobj": "bbob-biobj"}
        return f"{suite[self.kind]}_f{self.spec.function:03d}_i{self.spec.instance:02d}_d{self.dimension:02d}"

    @property
    def name(self) -> str:
        if self.kind == "biobj":
            first, second = (f.name for f in self.objectives)
            label = f"{first}/{second}"
        else:
            label = self.objectives[0].name
        return (
            f"{self.id.split('_')[0].upper()} suite problem f{self.spec.function} ({label}) "
            f"instance {self.spec.instance} in {self.dimension}D"
        )

    @property
    def number_of_objectives(self) -> int:
        return len(self.objectives)

    @property
    def number_of_constraints(self) -> int:
        return 0 if self.constraint_matrix is None else len(self.constraint_matrix)

    def _prepare(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.ndim != 1 or len(x) != self.dimension:
            raise InvalidArgumentError(
                f"Expected a vector of {self.dimension} values for {self.id}, got shape {x.shape}"
            )
        if self.number_of_integer_variables:
            x = x.copy()
            n_int = self.number_of_integer_variables
            x[:n_int] = np.round(x[:n_int])
        return x

    def _objective_values(self, x: np.ndarray) -> np.ndarray:
        return np.array([f.evaluate(x) for f in self.objectives])

    def _constraint_values(self, x: np.ndarray) -> np.ndarray:
        if self.constraint_matrix is None:
            return np.zeros(0)
        return self.constraint_matrix @ (x - self.objectives[0].xopt)

    def evaluate(self, x: np.ndarray) -> np.ndarray:
        """Evaluate objectives, update counters and the final target flag."""
        x = self._prepare(x)
        values = self._objective_values(x)
        self.evaluations += 1

        feasible = bool(np.all(self._constraint_values(x) <= 0.0))
        self.last_feasible = feasible
        if feasible:
            self.best_f = values.copy() if self.best_f is None else np.minimum(self.best_f, values)
            if np.all(self.best_f - self.ideal < FINAL_TARGET_PRECISION):
                self.final_target_hit = True
        return values

    def constraint(self, x: np.ndarray) -> np.ndarray:
        """Evaluate constraints (feasible when <= 0)."""
        x = self._prepare(x)
        self.evaluations_constraints += 1
        return self._constraint_values(x)

    def largest_fvalues_of_interest(self) -> np.ndarray:
        """Objective at the origin, or the nadir point for two objectives."""
        if self.kind == "biobj":
            first, second = self.objectives
            return np.array([first.evaluate(second.xopt), second.evaluate(first.xopt)])
        return self._objective_values(np.zeros(self.dimension))


class ReferenceBackend(EvaluatorBackend):
    """
    Numpy evaluator backend.

    Example:
        backend = ReferenceBackend()
        observer = backend.get_observer("bbob", "algorithm_name: RS")
        suite = backend.get_suite("bbob", "year: 2018", "dimensions: 2")
        problem = backend.next_problem(suite, observer)
        backend.evaluate_function(problem, np.zeros(2))
    """

    def __init__(self):
        self._suites: HandleArena[ReferenceSuite] = HandleArena("suite")
        self._observers: HandleArena[ReferenceObserver] = HandleArena("observer")
        self._problems: HandleArena[ReferenceProblem] = HandleArena("problem")

    @property
    def name(self) -> str:
        return "reference"

    def set_log_level(self, level: str) -> None:
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level '{level}'. Supported: {list(LOG_LEVELS)}")
        logging.getLogger(__package__).setLevel(LOG_LEVELS[level])

    def list_suites(self) -> List[str]:
        return list(SUITES)

    def list_observers(self) -> List[str]:
        return list(OBSERVERS)

    # Observer

    def get_observer(self, name: str, options: str) -> Handle:
        if name not in OBSERVERS:
            raise ConfigurationError(f"Unknown observer '{name}'. Available: {list(OBSERVERS)}")
        parsed = parse_options(options, OBSERVER_OPTIONS, context=f"observer '{name}' options")
        if "target_precision" in parsed:
            try:
                float(parsed["target_precision"])
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid target_precision '{parsed['target_precision']}'", original_error=e
                ) from e
        handle = self._observers.insert(ReferenceObserver(name, parsed))
        logger.debug(f"Acquired observer {name} as {handle}")
        return handle

    def finalize_observer(self, observer: Handle) -> None:
        resource = self._observers.remove(observer)
        for problem in resource.problems:
            self._release_problem(problem)
        logger.info(f"Observer {resource.name} finalized: {len(resource.records)} problems recorded")

    def observer_records(self, observer: Handle) -> Dict[str, ObserverRecord]:
        """Records collected by an observer, keyed by problem id."""
        return dict(self._observers.get(observer).records)

    # Suite

    def get_suite(self, name: str, instance: str, options: str) -> Handle:
        if name not in SUITES:
            raise ConfigurationError(f"Unknown suite '{name}'. Available: {list(SUITES)}")
        definition = SUITES[name]
        instances = self._parse_instances(instance)
        specs = self._build_catalogue(definition, instances, options)
        handle = self._suites.insert(ReferenceSuite(definition, instance, options, specs))
        logger.debug(f"Acquired suite {name} with {len(specs)} problems as {handle}")
        return handle

    def finalize_suite(self, suite: Handle) -> None:
        resource = self._suites.remove(suite)
        for problem in resource.problems:
            self._release_problem(problem)
        logger.debug(f"Suite {resource.name} finalized")

    def suite_size(self, suite: Handle) -> int:
        return len(self._suites.get(suite).specs)

    @staticmethod
    def _parse_instances(instance: str) -> List[int]:
        parsed = parse_options(instance, SUITE_INSTANCE_OPTIONS, context="suite instance")
        if "instances" in parsed:
            instances = parse_int_list(parsed["instances"], context="instance")
            if not instances or min(instances) < 1:
                raise ConfigurationError(f"Invalid instances '{parsed['instances']}'")
            return instances
        if "year" in parsed:
            try:
                year = int(parsed["year"])
            except ValueError as e:
                raise ConfigurationError(f"Invalid year '{parsed['year']}'", original_error=e) from e
            if year < 2009:
                raise ConfigurationError(f"Unsupported year {year}")
            return list(range(1, 6)) if year == 2009 else list(range(1, 16))
        return list(range(1, 16))

    @staticmethod
    def _build_catalogue(definition: SuiteDefinition, instances: List[int], options: str) -> List[ProblemSpec]:
        parsed = parse_options(options, SUITE_OPTIONS, context=f"suite '{definition.name}' options")

        dimensions: Sequence[int] = definition.dimensions
        if "dimensions" in parsed:
            dimensions = parse_int_list(parsed["dimensions"], context="dimension")
            unsupported = [d for d in dimensions if d not in definition.dimensions]
            if unsupported:
                raise ConfigurationError(
                    f"Dimensions {unsupported} not supported by suite '{definition.name}'. "
                    f"Supported: {list(definition.dimensions)}"
                )

        functions: Sequence[int] = definition.functions
        if "function_indices" in parsed:
            functions = parse_int_list(parsed["function_indices"], context="function index")
            unknown = [f for f in functions if f not in definition.functions]
            if unknown:
                raise ConfigurationError(f"Functions {unknown} not in suite '{definition.name}'")

        if "instance_indices" in parsed:
            positions = parse_int_list(parsed["instance_indices"], context="instance index")
            if any(p < 1 or p > len(instances) for p in positions):
                raise ConfigurationError(
                    f"Instance indices {positions} out of range 1-{len(instances)}"
                )
            instances = [instances[p - 1] for p in positions]

        specs: List[ProblemSpec] = []
        for dimension in sorted(set(dimensions)):
            for function in sorted(set(functions)):
                for instance in instances:
                    specs.append(ProblemSpec(function, dimension, instance, len(specs)))
        return specs

    # Problems

    def next_problem(self, suite: Handle, observer: Handle) -> Optional[Handle]:
        resource = self._suites.get(suite)
        bound = self._observers.get(observer)

        if resource.current is not None and resource.current in self._problems:
            self._release_problem(resource.current)
        resource.current = None

        if resource.cursor >= len(resource.specs):
            return None

        spec = resource.specs[resource.cursor]
        resource.cursor += 1
        handle = self._problems.insert(ReferenceProblem(resource.definition, spec, suite, observer))
        resource.problems.append(handle)
        bound.problems.append(handle)
        resource.current = handle
        return handle

    def problem_at(self, suite: Handle, index: int) -> Handle:
        resource = self._suites.get(suite)
        if not 0 <= index < len(resource.specs):
            raise ProblemIndexError(
                f"Problem index {index} out of range for suite {resource.name} "
                f"with {len(resource.specs)} problems"
            )
        handle = self._problems.insert(
            ReferenceProblem(resource.definition, resource.specs[index], suite, None)
        )
        resource.problems.append(handle)
        return handle

    def _release_problem(self, problem: Handle) -> None:
        if problem in self._problems:
            self._problems.remove(problem)

    # Evaluation

    def evaluate_function(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        resource = self._problems.get(problem)
        values = resource.evaluate(x)
        if resource.observer is not None:
            self._observers.get(resource.observer).observe(resource, values, resource.last_feasible)
        return values

    def evaluate_constraint(self, problem: Handle, x: np.ndarray) -> np.ndarray:
        return self._problems.get(problem).constraint(x)

    # Metadata

    def dimension(self, problem: Handle) -> int:
        return self._problems.get(problem).dimension

    def number_of_objectives(self, problem: Handle) -> int:
        return self._problems.get(problem).number_of_objectives

    def number_of_constraints(self, problem: Handle) -> int:
        return self._problems.get(problem).number_of_constraints

    def lower_bounds(self, problem: Handle) -> np.ndarray:
        return self._problems.get(problem).lower.copy()

    def upper_bounds(self, problem: Handle) -> np.ndarray:
        return self._problems.get(problem).upper.copy()

    def number_of_integer_variables(self, problem: Handle) -> int:
        return self._problems.get(problem).number_of_integer_variables

    def problem_id(self, problem: Handle) -> str:
        return self._problems.get(problem).id

    def problem_name(self, problem: Handle) -> str:
        return self._problems.get(problem).name

    def problem_index(self, problem: Handle) -> int:
        return self._problems.get(problem).index

    # Live values

    def evaluations(self, problem: Handle) -> int:
        return self._problems.get(problem).evaluations

    def evaluations_constraints(self, problem: Handle) -> int:
        return self._problems.get(problem).evaluations_constraints

    def final_target_hit(self, problem: Handle) -> bool:
        return self._problems.get(problem).final_target_hit

    def largest_fvalues_of_interest(self, problem: Handle) -> np.ndarray:
        return self._problems.get(problem).largest_fvalues_of_interest()
