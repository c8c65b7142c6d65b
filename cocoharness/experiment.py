"""
Experiment driver: benchmark construction and the solve loop.

Usage:
    benchmark = create_benchmark("bbob", "RS", "Random search", dimensions=[2, 3])
    summary = run_experiment(benchmark, RandomSearch(seed=1), budget_multiplier=100)
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple
import logging

from .backends import EvaluatorBackend
from .benchmark import Benchmark, BenchmarkState
from .exceptions import ConfigurationError, FinalizationError
from .observer import Observer
from .problem import Problem
from .solvers import Solver, SolverResult
from .suite import Suite
from .timing import Timing

logger = logging.getLogger(__name__)

SUITE_DIMENSIONS: Dict[str, Tuple[int, ...]] = {
    "bbob": (2, 3, 5, 10, 20, 40),
    "bbob-constrained": (2, 3, 5, 10, 20, 40),
    "bbob-biobj": (2, 3, 5, 10, 20, 40),
    "bbob-mixint": (5, 10, 20, 40, 80, 160),
}


@dataclass
class ProblemRecord:
    """Outcome of solving one problem."""

    problem_id: str
    index: int
    dimension: int
    evaluations: int
    evaluations_constraints: int
    final_target_hit: bool
    best_f: float


@dataclass
class ExperimentSummary:
    """All problem records of one experiment, plus the timing report."""

    algorithm_name: str
    suite_name: str
    records: List[ProblemRecord] = field(default_factory=list)
    timing_report: str = ""

    @property
    def n_problems(self) -> int:
        return len(self.records)

    @property
    def n_solved(self) -> int:
        return sum(1 for record in self.records if record.final_target_hit)

    @property
    def total_evaluations(self) -> int:
        return sum(record.evaluations for record in self.records)

    def by_dimension(self) -> Dict[int, List[ProblemRecord]]:
        """Records grouped by problem dimension, in suite order."""
        groups: Dict[int, List[ProblemRecord]] = {}
        for record in self.records:
            groups.setdefault(record.dimension, []).append(record)
        return groups


def observer_options(suite_name: str, algorithm_name: str, algorithm_info: str = "") -> str:
    """Observer option string naming the result folder and the algorithm."""
    algorithm = algorithm_name.upper()
    return (
        f"result_folder: {algorithm}_on_{suite_name} "
        f"algorithm_name: {algorithm} "
        f'algorithm_info "{algorithm_info}"'
    )


def create_benchmark(
    suite_name: str,
    algorithm_name: str,
    algorithm_info: str = "",
    dimensions: Optional[Sequence[int]] = None,
    suite_instance: str = "year: 2018",
    observer_name: Optional[str] = None,
    backend: Optional[EvaluatorBackend] = None,
) -> Benchmark:
    """
    Build a benchmark for one algorithm on one suite.

    Args:
        suite_name: Suite to run (e.g. "bbob", "bbob-mixint")
        algorithm_name: Algorithm name, upper-cased in the observer options
        algorithm_info: Short description of the algorithm
        dimensions: Dimensions to restrict the suite to
        suite_instance: Instance selector
        observer_name: Observer type (defaults to the suite name)
        backend: Evaluator backend (defaults to the process-wide one)

    Raises:
        ConfigurationError: If a dimension is not part of the suite
    """
    suite_options = ""
    if dimensions:
        allowed = SUITE_DIMENSIONS.get(suite_name)
        if allowed is not None:
            unsupported = [d for d in dimensions if d not in allowed]
            if unsupported:
                raise ConfigurationError(
                    f"Dimensions {unsupported} not available for suite '{suite_name}'. "
                    f"Supported: {list(allowed)}",
                    operation="create_benchmark",
                )
        suite_options = "dimensions: " + ",".join(str(d) for d in dimensions)

    suite = Suite(suite_name, suite_instance, suite_options, backend=backend)
    try:
        observer = Observer(
            observer_name or suite_name,
            observer_options(suite_name, algorithm_name, algorithm_info),
            backend=suite.backend,
        )
    except Exception:
        suite.finalize()
        raise

    logger.info(f"Benchmark {algorithm_name.upper()} on {suite_name}: {len(suite)} problems")
    return Benchmark(suite, observer)


def run_experiment(
    benchmark: Benchmark,
    solver: Solver,
    budget_multiplier: int = 100,
    timing: Optional[Timing] = None,
    callback: Optional[Callable[[Problem, ProblemRecord], None]] = None,
) -> ExperimentSummary:
    """
    Solve every problem of the benchmark, then finalize it.

    Each problem gets a budget of budget_multiplier * dimension objective
    evaluations. Timing is fed once per problem after it was solved.

    Args:
        benchmark: Benchmark to drive (not yet finalized)
        solver: Solver consuming each problem
        budget_multiplier: Evaluations per dimension
        timing: Timing aggregator (a new one writing to stdout by default)
        callback: Called with each solved problem and its record

    Returns:
        ExperimentSummary
    """
    timing = timing or Timing()
    summary = ExperimentSummary(algorithm_name=solver.name, suite_name=benchmark.suite.name)

    try:
        for problem in benchmark:
            result: SolverResult = solver(problem, budget_multiplier * problem.dimension)
            record = ProblemRecord(
                problem_id=problem.id,
                index=problem.index,
                dimension=problem.dimension,
                evaluations=problem.evaluations,
                evaluations_constraints=problem.evaluations_constraints,
                final_target_hit=problem.final_target_hit,
                best_f=result.best_f,
            )
            summary.records.append(record)
            timing.time_problem(problem)
            if callback is not None:
                callback(problem, record)
    except Exception:
        if benchmark.state != BenchmarkState.FINISHED:
            try:
                benchmark.finalize_benchmark()
            except FinalizationError as e:
                logger.error(f"Finalization after failed experiment also failed: {e}")
        raise

    benchmark.finalize_benchmark()
    summary.timing_report = timing.output()
    logger.info(
        f"{summary.algorithm_name} on {summary.suite_name}: "
        f"{summary.n_solved}/{summary.n_problems} problems solved"
    )
    return summary
