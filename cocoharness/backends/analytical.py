"""
Analytical test functions for the reference backend.

Fast, cheap functions with known optima, numbered after the BBOB functions
they are modelled on. Every instance is shifted: the optimum sits at a
pseudo-random xopt with value fopt, both derived deterministically from
(function, dimension, instance).
"""

from typing import Dict, Optional, Tuple, Type

import numpy as np


def instance_rng(function_id: int, dimension: int, instance: int, salt: int = 0) -> np.random.Generator:
    """Deterministic random generator for one problem instance."""
    return np.random.default_rng([function_id, dimension, instance, salt])


class AnalyticalFunction:
    """Base class for shifted analytical test functions."""

    function_id = 0
    name = "analytical"

    def __init__(self, dimension: int, instance: int = 1, xopt: Optional[np.ndarray] = None):
        """
        Initialize analytical function.

        Args:
            dimension: Problem dimensionality
            instance: Instance number, selects the shift and offset
            xopt: Explicit optimum location (overrides the instance shift)
        """
        self.dimension = dimension
        self.instance = instance

        rng = instance_rng(self.function_id, dimension, instance)
        if xopt is None:
            xopt = np.round(rng.uniform(-4.0, 4.0, size=dimension), 4)
        self.xopt = np.asarray(xopt, dtype=float)
        self.fopt = float(np.clip(np.round(rng.standard_cauchy() * 100.0, 2), -1000.0, 1000.0))

    def raw(self, z: np.ndarray) -> float:
        """
        Unshifted function, minimum 0 at z = 0.

        Args:
            z: Shifted design vector (x - xopt)
        """
        raise NotImplementedError

    def evaluate(self, x: np.ndarray) -> float:
        """Evaluate the shifted function at x."""
        z = np.asarray(x, dtype=float) - self.xopt
        return float(self.raw(z) + self.fopt)

    def get_optimum(self) -> Tuple[np.ndarray, float]:
        """
        Get known global optimum.

        Returns:
            (optimal_x, optimal_value) tuple
        """
        return self.xopt.copy(), self.fopt


class Sphere(AnalyticalFunction):
    """
    Sphere function.

    f(z) = sum_{i=1}^{n} z_i^2
    """

    function_id = 1
    name = "sphere"

    def raw(self, z: np.ndarray) -> float:
        return float(np.sum(z**2))


class Ellipsoid(AnalyticalFunction):
    """
    Separable ellipsoid, conditioning 1e6.

    f(z) = sum_{i=1}^{n} 10^(6 (i-1)/(n-1)) z_i^2
    """

    function_id = 2
    name = "ellipsoid"

    def raw(self, z: np.ndarray) -> float:
        n = len(z)
        if n == 1:
            return float(z[0] ** 2)
        weights = 10.0 ** (6.0 * np.arange(n) / (n - 1))
        return float(np.sum(weights * z**2))


class Rastrigin(AnalyticalFunction):
    """
    Rastrigin function - highly multimodal.

    f(z) = 10 (n - sum cos(2 pi z_i)) + sum z_i^2
    """

    function_id = 3
    name = "rastrigin"

    def raw(self, z: np.ndarray) -> float:
        return float(10.0 * (len(z) - np.sum(np.cos(2.0 * np.pi * z))) + np.sum(z**2))


class Rosenbrock(AnalyticalFunction):
    """
    Rosenbrock function - narrow curved valley.

    f(z) = sum_{i=1}^{n-1} [100 (y_{i+1} - y_i^2)^2 + (1 - y_i)^2],  y = z + 1
    """

    function_id = 8
    name = "rosenbrock"

    def raw(self, z: np.ndarray) -> float:
        y = z + 1.0
        if len(y) < 2:
            return float((1.0 - y[0]) ** 2)
        return float(np.sum(100.0 * (y[1:] - y[:-1] ** 2) ** 2) + np.sum((1.0 - y[:-1]) ** 2))


class BentCigar(AnalyticalFunction):
    """
    Bent cigar - one sensitive direction.

    f(z) = z_1^2 + 1e6 sum_{i>1} z_i^2
    """

    function_id = 12
    name = "bent_cigar"

    def raw(self, z: np.ndarray) -> float:
        return float(z[0] ** 2 + 1e6 * np.sum(z[1:] ** 2))


FUNCTIONS: Dict[int, Type[AnalyticalFunction]] = {
    cls.function_id: cls for cls in (Sphere, Ellipsoid, Rastrigin, Rosenbrock, BentCigar)
}


def get_analytical_function(
    function_id: int,
    dimension: int,
    instance: int = 1,
    xopt: Optional[np.ndarray] = None,
) -> AnalyticalFunction:
    """
    Get analytical test function by BBOB function number.

    Args:
        function_id: One of the keys of FUNCTIONS
        dimension: Problem dimension
        instance: Instance number
        xopt: Explicit optimum location

    Raises:
        ValueError: If function number not recognized
    """
    if function_id not in FUNCTIONS:
        raise ValueError(
            f"Unknown function: f{function_id}. Available: {sorted(FUNCTIONS)}"
        )
    return FUNCTIONS[function_id](dimension, instance=instance, xopt=xopt)
