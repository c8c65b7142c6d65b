"""
Evaluator backends for the benchmark harness.

Provides:
- EvaluatorBackend interface and Handle types
- ReferenceBackend (numpy test functions)
- CocoexBackend (COCO experimentation package)
"""

from typing import Dict, List, Type

from ..exceptions import ConfigurationError
from .base import EvaluatorBackend
from .cocoex_backend import CocoexBackend
from .handles import Handle, HandleArena
from .reference import ReferenceBackend

BACKENDS: Dict[str, Type[EvaluatorBackend]] = {
    "reference": ReferenceBackend,
    "cocoex": CocoexBackend,
}


def get_backend_class(name: str) -> Type[EvaluatorBackend]:
    """
    Look up a backend class by name.

    Raises:
        ConfigurationError: If backend name not recognized
    """
    try:
        return BACKENDS[name.lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown backend: {name}. Available: {list(BACKENDS)}") from None


def available_backends() -> List[str]:
    """Names of backends whose dependencies are installed."""
    return [name for name, cls in BACKENDS.items() if cls.is_available()]


__all__ = [
    "EvaluatorBackend",
    "Handle",
    "HandleArena",
    "ReferenceBackend",
    "CocoexBackend",
    "BACKENDS",
    "get_backend_class",
    "available_backends",
]
