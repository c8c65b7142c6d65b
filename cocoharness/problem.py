"""
Problem descriptor and evaluation contract.

A Problem snapshots the immutable metadata of one backend problem when it is
constructed. Evaluation counters, the final target flag and the largest
f-values of interest change while the problem is being solved and are read
from the backend on every access.
"""

from typing import Sequence, Union

import numpy as np

from .backends import EvaluatorBackend, Handle
from .exceptions import ConstructionError, InvalidArgumentError, wrap_error

Vector = Union[Sequence[float], np.ndarray]


def _frozen(values) -> np.ndarray:
    array = np.array(values, dtype=float)
    array.flags.writeable = False
    return array


class Problem:
    """
    View over one benchmark problem.

    Valid until the owning suite or the attached observer is finalized.

    Attributes (fixed for the lifetime of the descriptor):
        dimension: Number of variables
        number_of_objectives: Length of evaluate_function results
        number_of_constraints: Length of evaluate_constraint results
        lower_bounds, upper_bounds: Read-only arrays of length dimension
        number_of_integer_variables: Leading variables that are integer valued
        id: Identifier, unique within the suite
        name: Display name
        index: Ordinal position in the suite
    """

    def __init__(self, backend: EvaluatorBackend, handle: Handle):
        """
        Snapshot the problem metadata.

        Args:
            backend: Evaluator backend owning the problem
            handle: Problem handle

        Raises:
            ConstructionError: If any metadata read fails
        """
        self.backend = backend
        self.handle = handle

        try:
            dimension = int(backend.dimension(handle))
            number_of_objectives = int(backend.number_of_objectives(handle))
            number_of_constraints = int(backend.number_of_constraints(handle))

            lower_bounds = _frozen(backend.lower_bounds(handle))
            upper_bounds = _frozen(backend.upper_bounds(handle))
            number_of_integer_variables = int(backend.number_of_integer_variables(handle))

            problem_id = str(backend.problem_id(handle))
            name = str(backend.problem_name(handle))
            index = int(backend.problem_index(handle))
        except Exception as e:
            raise ConstructionError(
                "Problem constructor failed.", operation="problem.construct", original_error=e
            ) from e

        self._dimension = dimension
        self._number_of_objectives = number_of_objectives
        self._number_of_constraints = number_of_constraints
        self._lower_bounds = lower_bounds
        self._upper_bounds = upper_bounds
        self._number_of_integer_variables = number_of_integer_variables
        self._id = problem_id
        self._name = name
        self._index = index

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def number_of_objectives(self) -> int:
        return self._number_of_objectives

    @property
    def number_of_constraints(self) -> int:
        return self._number_of_constraints

    @property
    def lower_bounds(self) -> np.ndarray:
        return self._lower_bounds

    @property
    def upper_bounds(self) -> np.ndarray:
        return self._upper_bounds

    @property
    def number_of_integer_variables(self) -> int:
        return self._number_of_integer_variables

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def index(self) -> int:
        return self._index

    def _check_vector(self, x: Vector, operation: str) -> np.ndarray:
        array = np.asarray(x, dtype=float)
        if array.ndim != 1 or array.shape[0] != self.dimension:
            raise InvalidArgumentError(
                f"{operation} expects a vector of {self.dimension} values, got shape {array.shape}",
                operation=operation,
            )
        return array

    def evaluate_function(self, x: Vector) -> np.ndarray:
        """
        Evaluate the objectives at x.

        Args:
            x: Vector of exactly `dimension` values

        Returns:
            Array of `number_of_objectives` values

        Raises:
            InvalidArgumentError: If x has the wrong length
        """
        x = self._check_vector(x, "evaluate_function")
        try:
            return np.asarray(self.backend.evaluate_function(self.handle, x), dtype=float)
        except Exception as e:
            raise wrap_error("evaluate_function", f"Evaluation of {self.id} failed.", e) from e

    def evaluate_constraint(self, x: Vector) -> np.ndarray:
        """
        Evaluate the constraints at x (feasible where values are <= 0).

        Returns:
            Array of `number_of_constraints` values
        """
        x = self._check_vector(x, "evaluate_constraint")
        try:
            return np.asarray(self.backend.evaluate_constraint(self.handle, x), dtype=float)
        except Exception as e:
            raise wrap_error("evaluate_constraint", f"Constraint evaluation of {self.id} failed.", e) from e

    __call__ = evaluate_function

    @property
    def evaluations(self) -> int:
        """Objective evaluations so far (live)."""
        return int(self.backend.evaluations(self.handle))

    @property
    def evaluations_constraints(self) -> int:
        """Constraint evaluations so far (live)."""
        return int(self.backend.evaluations_constraints(self.handle))

    @property
    def final_target_hit(self) -> bool:
        """Whether the backend considers the optimum reached (live)."""
        return bool(self.backend.final_target_hit(self.handle))

    @property
    def largest_fvalues_of_interest(self) -> np.ndarray:
        """Largest objective values of interest (live)."""
        return np.asarray(self.backend.largest_fvalues_of_interest(self.handle), dtype=float)

    @property
    def initial_solution(self) -> np.ndarray:
        """Center of the bounds box, rounded on integer variables."""
        center = (self.lower_bounds + self.upper_bounds) / 2.0
        center[: self.number_of_integer_variables] = np.floor(center[: self.number_of_integer_variables])
        return center

    def __str__(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"Problem(id={self.id!r}, dimension={self.dimension}, index={self.index})"
