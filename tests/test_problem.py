"""
Tests for the Problem descriptor.
"""

import numpy as np
import pytest

from cocoharness.backends.analytical import get_analytical_function
from cocoharness.exceptions import ConstructionError, InvalidArgumentError, LifecycleError
from cocoharness.observer import Observer
from cocoharness.problem import Problem
from cocoharness.suite import Suite


@pytest.fixture
def suite(backend):
    return Suite("bbob", "instances: 1-2", "dimensions: 2,3 function_indices: 1", backend=backend)


@pytest.fixture
def observer(backend):
    return Observer("bbob", "", backend=backend)


class TestMetadata:

    def test_snapshot(self, suite, observer):
        problem = suite.get_next_problem(observer)

        assert problem.dimension == 2
        assert problem.number_of_objectives == 1
        assert problem.number_of_constraints == 0
        assert problem.number_of_integer_variables == 0
        assert problem.id == "bbob_f001_i01_d02"
        assert problem.index == 0
        assert str(problem) == problem.id
        np.testing.assert_array_equal(problem.lower_bounds, [-5.0, -5.0])
        np.testing.assert_array_equal(problem.upper_bounds, [5.0, 5.0])

    def test_bounds_read_only(self, suite, observer):
        problem = suite.get_next_problem(observer)

        with pytest.raises(ValueError):
            problem.lower_bounds[0] = 1.0

    def test_metadata_read_only(self, suite, observer):
        problem = suite.get_next_problem(observer)

        for attribute in ("dimension", "number_of_objectives", "number_of_constraints", "id", "name", "index"):
            with pytest.raises(AttributeError):
                setattr(problem, attribute, 7)
        with pytest.raises(AttributeError):
            problem.lower_bounds = np.zeros(2)
        assert problem.dimension == 2
        assert problem.id == "bbob_f001_i01_d02"

    def test_metadata_survives_finalization(self, suite, observer):
        problem = suite.get_next_problem(observer)
        suite.finalize()

        assert problem.dimension == 2
        assert problem.id == "bbob_f001_i01_d02"

    def test_construction_failure(self, backend, suite, monkeypatch):
        handle = backend.problem_at(suite.handle, 0)

        def broken(problem):
            raise RuntimeError("metadata unavailable")

        monkeypatch.setattr(backend, "problem_name", broken)
        with pytest.raises(ConstructionError) as exc_info:
            Problem(backend, handle)
        assert "Problem constructor failed." in str(exc_info.value)

    def test_initial_solution(self, backend):
        suite = Suite("bbob-mixint", "instances: 1", "dimensions: 5 function_indices: 1", backend=backend)
        problem = suite.get_problem(0)

        np.testing.assert_array_equal(problem.initial_solution, [0.0, 1.0, 3.0, 7.0, 0.0])


class TestEvaluation:

    def test_live_counters(self, suite, observer):
        problem = suite.get_next_problem(observer)
        sphere = get_analytical_function(1, 2, 1)

        assert problem.evaluations == 0
        assert not problem.final_target_hit

        values = problem.evaluate_function([0.0, 0.0])
        assert values.shape == (1,)
        assert problem.evaluations == 1

        problem(sphere.xopt)
        assert problem.evaluations == 2
        assert problem.final_target_hit

    def test_evaluate_constraint_on_unconstrained(self, suite, observer):
        problem = suite.get_next_problem(observer)

        assert problem.evaluate_constraint(np.zeros(2)).shape == (0,)
        assert problem.evaluations_constraints == 1

    def test_wrong_length(self, suite, observer):
        problem = suite.get_next_problem(observer)

        with pytest.raises(InvalidArgumentError):
            problem.evaluate_function(np.zeros(3))
        with pytest.raises(InvalidArgumentError):
            problem.evaluate_constraint([1.0])
        with pytest.raises(ValueError):
            problem.evaluate_function(np.zeros((2, 2)))
        assert problem.evaluations == 0

    def test_largest_fvalues_of_interest(self, suite, observer):
        problem = suite.get_next_problem(observer)
        sphere = get_analytical_function(1, 2, 1)

        np.testing.assert_allclose(problem.largest_fvalues_of_interest, [sphere.evaluate(np.zeros(2))])

    def test_invalid_after_next_problem(self, suite, observer):
        first = suite.get_next_problem(observer)
        suite.get_next_problem(observer)

        with pytest.raises(LifecycleError):
            first.evaluate_function(np.zeros(2))
        with pytest.raises(LifecycleError):
            _ = first.evaluations

    def test_invalid_after_suite_finalize(self, suite, observer):
        problem = suite.get_problem(3)
        suite.finalize()

        with pytest.raises(LifecycleError):
            problem.evaluate_function(np.zeros(3))
