"""
Tests for the cocoex backend.

The adapter tests run against an in-memory stand-in for the cocoex module;
TestInstalledCocoex runs only when coco-experiment is installed.
"""

import sys
import types

import numpy as np
import pytest

from cocoharness.backends import CocoexBackend
from cocoharness.benchmark import Benchmark
from cocoharness.exceptions import ConfigurationError, LifecycleError, ProblemIndexError
from cocoharness.observer import Observer
from cocoharness.suite import Suite


class FakeProblem:
    def __init__(self, index):
        self.index = index
        self.id = f"bbob_f001_i{index + 1:02d}_d02"
        self.name = self.id
        self.dimension = 2
        self.number_of_objectives = 1
        self.number_of_constraints = 0
        self.number_of_integer_variables = 0
        self.lower_bounds = [-5.0, -5.0]
        self.upper_bounds = [5.0, 5.0]
        self.evaluations = 0
        self.evaluations_constraints = 0
        self.final_target_hit = False
        self.largest_fvalues_of_interest = [1000.0]
        self.free_calls = 0

    def __call__(self, x):
        self.evaluations += 1
        return float(np.sum(np.asarray(x) ** 2))

    def free(self):
        self.free_calls += 1


class FakeObserver:
    def __init__(self, name, options):
        if not isinstance(options, str):
            raise TypeError("expect a string")
        self.name = name

    def free(self):
        # mirrors the released cocoex packages
        raise AttributeError("'Observer' object has no attribute '__dealloc__'")


class FakeSuite:
    def __init__(self, name, instance, options):
        self.size = 2
        self.cursor = 0
        self.indexed = []
        self.freed = False

    def __len__(self):
        return self.size

    def next_problem(self, observer):
        if self.cursor >= self.size:
            return None
        self.cursor += 1
        return FakeProblem(self.cursor - 1)

    def get_problem(self, index):
        problem = FakeProblem(index)
        self.indexed.append(problem)
        return problem

    def free(self):
        self.freed = True


@pytest.fixture
def fake_backend(monkeypatch):
    module = types.ModuleType("cocoex")
    module.known_suite_names = ["bbob"]
    module.Suite = FakeSuite
    module.Observer = FakeObserver
    module.log_level = lambda level: level
    monkeypatch.setitem(sys.modules, "cocoex", module)
    return CocoexBackend()


class TestCocoexAdapter:

    def test_benchmark_finalizes_cleanly(self, fake_backend):
        benchmark = Benchmark(
            Suite("bbob", "", "dimensions: 2", backend=fake_backend),
            Observer("bbob", "result_folder: RS_on_bbob", backend=fake_backend),
        )
        problem = benchmark.get_next_problem()
        problem.evaluate_function(np.zeros(2))

        benchmark.finalize_benchmark()

        assert benchmark.observer.finalized
        assert benchmark.suite.finalized
        with pytest.raises(LifecycleError):
            problem.evaluate_function(np.zeros(2))

    def test_observer_rejected_options(self, fake_backend):
        with pytest.raises(ConfigurationError):
            Observer("bbob", 12345, backend=fake_backend)

    def test_unknown_observer(self, fake_backend):
        with pytest.raises(ConfigurationError):
            fake_backend.get_observer("bbob-noisy", "")

    def test_finalize_suite_frees_indexed_problems(self, fake_backend):
        suite = fake_backend.get_suite("bbob", "", "")
        native_suite = fake_backend._suites.get(suite).suite
        fake_backend.problem_at(suite, 0)
        fake_backend.problem_at(suite, 1)

        fake_backend.finalize_suite(suite)

        assert [problem.free_calls for problem in native_suite.indexed] == [1, 1]
        assert native_suite.freed

    def test_sequential_problems_not_freed(self, fake_backend):
        suite = fake_backend.get_suite("bbob", "", "")
        observer = fake_backend.get_observer("bbob", "")

        first = fake_backend.next_problem(suite, observer)
        native = fake_backend._problems.get(first)
        fake_backend.next_problem(suite, observer)
        fake_backend.finalize_observer(observer)
        fake_backend.finalize_suite(suite)

        assert native.free_calls == 0

    def test_problem_at_out_of_range(self, fake_backend):
        suite = fake_backend.get_suite("bbob", "", "")

        with pytest.raises(ProblemIndexError):
            fake_backend.problem_at(suite, 2)


@pytest.fixture
def backend(tmp_path, monkeypatch):
    pytest.importorskip("cocoex")
    monkeypatch.chdir(tmp_path)
    return CocoexBackend()


class TestInstalledCocoex:

    def test_available(self, backend):
        assert CocoexBackend.is_available()

    def test_sequential_problems(self, backend):
        suite = backend.get_suite("bbob", "", "dimensions: 2 function_indices: 1 instance_indices: 1-2")
        observer = backend.get_observer("bbob", "result_folder: TEST_on_bbob")

        first = backend.next_problem(suite, observer)
        assert backend.dimension(first) == 2
        values = backend.evaluate_function(first, np.zeros(2))
        assert values.shape == (1,)
        assert backend.evaluations(first) == 1

        second = backend.next_problem(suite, observer)
        assert second is not None
        with pytest.raises(LifecycleError):
            backend.evaluations(first)

        assert backend.next_problem(suite, observer) is None
        backend.finalize_observer(observer)
        backend.finalize_suite(suite)

    def test_benchmark_round_trip(self, backend):
        benchmark = Benchmark(
            Suite("bbob", "", "dimensions: 2 function_indices: 1 instance_indices: 1", backend=backend),
            Observer("bbob", "result_folder: RS_on_bbob", backend=backend),
        )
        for problem in benchmark:
            problem.evaluate_function(np.zeros(2))
        benchmark.finalize_benchmark()

    def test_observer_rejected_options(self, backend):
        with pytest.raises(ConfigurationError):
            Observer("bbob", 12345, backend=backend)

    def test_indexed_problem(self, backend):
        suite = backend.get_suite("bbob", "", "dimensions: 2 function_indices: 1 instance_indices: 1")

        problem = backend.problem_at(suite, 0)
        backend.evaluate_function(problem, np.zeros(2))
        with pytest.raises(ProblemIndexError):
            backend.problem_at(suite, 5)
        backend.finalize_suite(suite)
