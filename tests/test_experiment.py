"""
Tests for the experiment driver.
"""

import io

import numpy as np
import pytest

from cocoharness.benchmark import BenchmarkState
from cocoharness.exceptions import ConfigurationError
from cocoharness.experiment import create_benchmark, observer_options, run_experiment
from cocoharness.solvers import RandomSearch, Solver, SolverResult
from cocoharness.timing import Timing


class OneShotSolver(Solver):
    """Evaluates the initial solution once."""

    @property
    def name(self):
        return "ONESHOT"

    def solve(self, problem, budget):
        values = problem.evaluate_function(problem.initial_solution)
        return SolverResult(problem.initial_solution, float(values[0]), problem.evaluations, problem.final_target_hit)


class FailingSolver(Solver):

    @property
    def name(self):
        return "FAIL"

    def solve(self, problem, budget):
        raise RuntimeError("solver crashed")


class TestCreateBenchmark:

    def test_observer_options(self):
        assert observer_options("bbob", "rs", "Random search") == (
            'result_folder: RS_on_bbob algorithm_name: RS algorithm_info "Random search"'
        )

    def test_create(self, backend):
        benchmark = create_benchmark("bbob", "rs", "Random search", dimensions=[2, 3], backend=backend)

        assert benchmark.suite.options == "dimensions: 2,3"
        assert benchmark.suite.instance == "year: 2018"
        assert benchmark.observer.name == "bbob"
        assert "algorithm_name: RS" in benchmark.observer.options
        assert len(benchmark.suite) == 5 * 15 * 2

    def test_observer_name_override(self, backend):
        benchmark = create_benchmark("bbob-mixint", "rs", observer_name="no_observer", backend=backend)
        assert benchmark.observer.name == "no_observer"

    def test_unsupported_dimension(self, backend):
        with pytest.raises(ConfigurationError, match="not available"):
            create_benchmark("bbob-mixint", "rs", dimensions=[2], backend=backend)

    def test_observer_failure_releases_suite(self, backend):
        with pytest.raises(ConfigurationError):
            create_benchmark("bbob", "rs", observer_name="bbob-noisy", backend=backend)
        assert len(backend._suites) == 0


class TestRunExperiment:

    def test_run(self, backend):
        benchmark = create_benchmark(
            "bbob", "rs", dimensions=[2, 3], suite_instance="instances: 1-2", backend=backend
        )
        stream = io.StringIO()
        seen = []

        summary = run_experiment(
            benchmark,
            RandomSearch(seed=3),
            budget_multiplier=10,
            timing=Timing(stream=stream),
            callback=lambda problem, record: seen.append(record.problem_id),
        )

        assert benchmark.state == BenchmarkState.FINISHED
        assert summary.algorithm_name == "RS"
        assert summary.suite_name == "bbob"
        assert summary.n_problems == 5 * 2 * 2
        assert seen == [record.problem_id for record in summary.records]
        for record in summary.records:
            assert record.evaluations == 10 * record.dimension or record.final_target_hit
        assert sorted(summary.by_dimension()) == [2, 3]

        report = stream.getvalue()
        assert summary.timing_report == report
        assert "d=2 done in" in report
        assert "d=3 done in" in report
        assert "Total elapsed time:" in report

    def test_records(self, backend):
        benchmark = create_benchmark(
            "bbob", "oneshot", dimensions=[2], suite_instance="instances: 1", backend=backend
        )
        summary = run_experiment(benchmark, OneShotSolver(), timing=Timing(stream=io.StringIO()))

        assert [record.index for record in summary.records] == [0, 1, 2, 3, 4]
        assert summary.total_evaluations == 5
        assert all(np.isfinite(record.best_f) for record in summary.records)

    def test_solver_failure_finalizes_and_reraises(self, backend):
        benchmark = create_benchmark("bbob", "fail", dimensions=[2], backend=backend)
        stream = io.StringIO()

        with pytest.raises(RuntimeError, match="solver crashed"):
            run_experiment(benchmark, FailingSolver(), timing=Timing(stream=stream))

        assert benchmark.state == BenchmarkState.FINISHED
        assert benchmark.suite.finalized
        assert benchmark.observer.finalized
        assert stream.getvalue() == ""
