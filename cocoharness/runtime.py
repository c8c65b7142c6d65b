"""
Process-wide evaluator backend.

The backend is attached once per process. Suites and observers created
without an explicit backend use the attached one:

    from cocoharness import runtime
    runtime.initialize("reference")
    backend = runtime.get_backend()
"""

from typing import Optional
import logging
import threading

from .backends import EvaluatorBackend, get_backend_class
from .config import load_settings
from .exceptions import HarnessError, LifecycleError, ResourceError

logger = logging.getLogger(__name__)

_LOCK = threading.Lock()
_BACKEND: Optional[EvaluatorBackend] = None


def initialize(backend_name: Optional[str] = None, log_level: Optional[str] = None) -> EvaluatorBackend:
    """
    Attach the process-wide backend.

    Repeated calls with the same backend name return the attached backend.

    Args:
        backend_name: Backend to attach (defaults to COCOHARNESS_BACKEND)
        log_level: Backend log level (defaults to COCOHARNESS_LOG_LEVEL)

    Returns:
        The attached backend

    Raises:
        LifecycleError: If a different backend is already attached
        ResourceError: If the backend cannot be attached
    """
    global _BACKEND

    with _LOCK:
        if backend_name is None or log_level is None:
            settings = load_settings()
            backend_name = backend_name or settings.backend
            log_level = log_level or settings.log_level

        if _BACKEND is not None:
            if _BACKEND.name != backend_name.lower():
                raise LifecycleError(
                    f"Backend '{_BACKEND.name}' already attached, cannot attach '{backend_name}'",
                    operation="initialize",
                )
            return _BACKEND

        backend_class = get_backend_class(backend_name)
        try:
            backend = backend_class()
            backend.set_log_level(log_level)
        except HarnessError:
            raise
        except Exception as e:
            raise ResourceError(
                f"Attaching backend '{backend_name}' failed", operation="initialize", original_error=e
            ) from e

        _BACKEND = backend
        logger.info(f"Attached evaluator backend '{backend.name}' (log level {log_level})")
        return backend


def get_backend() -> EvaluatorBackend:
    """Return the attached backend, attaching the configured one if needed."""
    if _BACKEND is not None:
        return _BACKEND
    return initialize()


def set_log_level(level: str) -> None:
    """Set the process-wide backend log level."""
    get_backend().set_log_level(level)


def reset() -> None:
    """Detach the process-wide backend."""
    global _BACKEND
    with _LOCK:
        _BACKEND = None
