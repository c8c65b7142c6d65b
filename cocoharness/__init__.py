"""
cocoharness - Black-box optimization benchmark harness.

Drives benchmark suites of test problems through an evaluator backend,
records runs with observers and reports per-dimension timing.

Example:
    from cocoharness import Benchmark, Observer, Suite, Timing

    benchmark = Benchmark(Suite("bbob", "year: 2018", "dimensions: 2"), Observer("bbob"))
    timing = Timing()
    for problem in benchmark:
        problem.evaluate_function(problem.initial_solution)
        timing.time_problem(problem)
    benchmark.finalize_benchmark()
    timing.output()
"""

from .benchmark import Benchmark, BenchmarkState
from .config import HarnessSettings, load_settings
from .exceptions import (
    ConfigurationError,
    ConstructionError,
    ErrorKind,
    FinalizationError,
    HarnessError,
    InvalidArgumentError,
    IterationError,
    LifecycleError,
    ProblemIndexError,
    ResourceError,
)
from .experiment import ExperimentSummary, ProblemRecord, create_benchmark, run_experiment
from .observer import Observer
from .problem import Problem
from .solvers import RandomSearch, ScipySolver, Solver, SolverResult, get_solver
from .suite import Suite
from .timing import Timing

__version__ = "0.1.0"

__all__ = [
    "Benchmark",
    "BenchmarkState",
    "Suite",
    "Observer",
    "Problem",
    "Timing",
    "HarnessSettings",
    "load_settings",
    "create_benchmark",
    "run_experiment",
    "ExperimentSummary",
    "ProblemRecord",
    "Solver",
    "SolverResult",
    "RandomSearch",
    "ScipySolver",
    "get_solver",
    "ErrorKind",
    "HarnessError",
    "ConfigurationError",
    "ResourceError",
    "ConstructionError",
    "InvalidArgumentError",
    "ProblemIndexError",
    "LifecycleError",
    "IterationError",
    "FinalizationError",
]
