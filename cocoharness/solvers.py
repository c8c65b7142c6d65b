"""
Baseline solvers that consume benchmark problems.

Solvers are looked up by specification string:
- "random": Uniform random search (numpy)
- "scipy" / "scipy:<method>": scipy.optimize.minimize with restarts

Every solver stops when the evaluation budget is spent or the problem
reports that its final target was hit.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

import numpy as np
from scipy.optimize import minimize

from .exceptions import ConfigurationError
from .problem import Problem

logger = logging.getLogger(__name__)

CONSTRAINT_PENALTY = 1e6


@dataclass
class SolverResult:
    """Best point found on one problem."""

    best_x: Optional[np.ndarray]
    best_f: float
    evaluations: int
    final_target_hit: bool
    restarts: int = 0


class Solver(ABC):
    """Base class for problem solvers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Solver identifier used in observer options (e.g., 'RS', 'SCIPY-NELDER-MEAD')."""
        pass

    @abstractmethod
    def solve(self, problem: Problem, budget: int) -> SolverResult:
        """
        Spend up to `budget` objective evaluations on the problem.

        Args:
            problem: Problem to solve
            budget: Total objective evaluations allowed, including those
                already performed on the problem

        Returns:
            SolverResult
        """
        pass

    def __call__(self, problem: Problem, budget: int) -> SolverResult:
        return self.solve(problem, budget)

    @staticmethod
    def scalarize(problem: Problem, values: np.ndarray, x: np.ndarray) -> float:
        """Sum of objectives, plus a penalty on constraint violations."""
        value = float(np.sum(values))
        if problem.number_of_constraints:
            violation = np.maximum(problem.evaluate_constraint(x), 0.0)
            value += CONSTRAINT_PENALTY * float(np.sum(violation))
        return value


class RandomSearch(Solver):
    """
    Uniform random search within the bounds.

    Integer variables are drawn uniformly from their integer range.
    Constraints are evaluated before the objectives.
    """

    def __init__(self, seed: Optional[int] = None, batch_size: int = 100):
        self.rng = np.random.default_rng(seed)
        self.batch_size = batch_size

    @property
    def name(self) -> str:
        return "RS"

    def _sample(self, problem: Problem, count: int) -> np.ndarray:
        lower, upper = problem.lower_bounds, problem.upper_bounds
        samples = lower + self.rng.random((count, problem.dimension)) * (upper - lower)
        n_int = problem.number_of_integer_variables
        if n_int:
            samples[:, :n_int] = self.rng.integers(
                lower[:n_int].astype(int), upper[:n_int].astype(int) + 1, size=(count, n_int)
            )
        return samples

    def solve(self, problem: Problem, budget: int) -> SolverResult:
        best_x: Optional[np.ndarray] = None
        best_f = float("inf")

        while problem.evaluations < budget and not problem.final_target_hit:
            count = min(self.batch_size, budget - problem.evaluations)
            for x in self._sample(problem, count):
                constraints = problem.evaluate_constraint(x) if problem.number_of_constraints else None
                value = float(np.sum(problem.evaluate_function(x)))
                if constraints is not None:
                    value += CONSTRAINT_PENALTY * float(np.sum(np.maximum(constraints, 0.0)))
                if value < best_f:
                    best_x, best_f = x.copy(), value
                if problem.final_target_hit:
                    break

        return SolverResult(best_x, best_f, problem.evaluations, problem.final_target_hit)


class _Stop(Exception):
    """Raised inside the objective to end a scipy run."""


class ScipySolver(Solver):
    """
    scipy.optimize.minimize with uniform random restarts.

    The first run starts from the center of the bounds; subsequent runs
    start from uniform random points until the budget is spent.
    """

    METHODS = ("Nelder-Mead", "Powell", "L-BFGS-B", "COBYLA", "SLSQP", "TNC")

    def __init__(self, method: str = "Nelder-Mead", seed: Optional[int] = None, max_restarts: int = 1000):
        if method not in self.METHODS:
            raise ConfigurationError(f"Unknown scipy method: {method}. Supported: {list(self.METHODS)}")
        self.method = method
        self.rng = np.random.default_rng(seed)
        self.max_restarts = max_restarts

    @property
    def name(self) -> str:
        return f"SCIPY-{self.method.upper()}"

    def solve(self, problem: Problem, budget: int) -> SolverResult:
        lower, upper = problem.lower_bounds, problem.upper_bounds
        bounds = list(zip(lower, upper))
        best = {"x": None, "f": float("inf")}

        def objective(x: np.ndarray) -> float:
            if problem.evaluations >= budget or problem.final_target_hit:
                raise _Stop()
            x = np.clip(x, lower, upper)
            value = self.scalarize(problem, problem.evaluate_function(x), x)
            if value < best["f"]:
                best["x"], best["f"] = x.copy(), value
            return value

        restarts = 0
        x0 = problem.initial_solution
        while restarts <= self.max_restarts:
            try:
                minimize(objective, x0, method=self.method, bounds=bounds)
            except _Stop:
                break
            if problem.evaluations >= budget or problem.final_target_hit:
                break
            restarts += 1
            x0 = lower + self.rng.random(problem.dimension) * (upper - lower)

        logger.debug(f"{self.name} on {problem.id}: {problem.evaluations} evaluations, {restarts} restarts")
        return SolverResult(best["x"], best["f"], problem.evaluations, problem.final_target_hit, restarts)


SOLVERS: Dict[str, str] = {
    "random": "Uniform random search",
    "scipy": "scipy.optimize.minimize with restarts (scipy:<method>)",
}


def get_solver(spec: str, seed: Optional[int] = None) -> Solver:
    """
    Build a solver from its specification.

    Args:
        spec: "random", "scipy" or "scipy:<method>"
        seed: Random seed

    Raises:
        ConfigurationError: If the specification is not recognized
    """
    name, _, method = spec.partition(":")
    name = name.lower()
    if name == "random":
        return RandomSearch(seed=seed)
    if name == "scipy":
        return ScipySolver(method or "Nelder-Mead", seed=seed)
    raise ConfigurationError(f"Unknown solver: {spec}. Available: {list(SOLVERS)}")


def list_solvers() -> List[str]:
    """Solver specifications, including every scipy method."""
    return ["random"] + [f"scipy:{method}" for method in ScipySolver.METHODS]
