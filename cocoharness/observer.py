"""
Observer: a named logging attachment for benchmark problems.
"""

from typing import Optional
import logging

from .backends import EvaluatorBackend, Handle
from .exceptions import LifecycleError, wrap_error

logger = logging.getLogger(__name__)


class Observer:
    """
    Logging attachment acquired from the evaluator backend.

    Must be finalized exactly once, after every problem it is attached to
    has stopped being evaluated.

    Example:
        observer = Observer("bbob", "result_folder: RS_on_bbob algorithm_name: RS")
        ...
        observer.finalize()
    """

    def __init__(self, name: str, options: str = "", backend: Optional[EvaluatorBackend] = None):
        """
        Acquire the observer.

        Args:
            name: Observer type recognized by the backend (e.g. "bbob")
            options: COCO-style option string
            backend: Evaluator backend (defaults to the process-wide one)

        Raises:
            ConfigurationError: Unrecognized name or options
            ResourceError: Acquisition failed otherwise
        """
        if backend is None:
            from .runtime import get_backend
            backend = get_backend()

        self.backend = backend
        self.name = name
        self.options = options
        self._finalized = False

        try:
            self.handle: Handle = backend.get_observer(name, options)
        except Exception as e:
            raise wrap_error("observer.construct", "Observer constructor failed.", e) from e
        logger.debug(f"Observer {name} acquired ({self.handle})")

    @property
    def finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> None:
        """
        Release the observer.

        Raises:
            LifecycleError: If already finalized
            ResourceError: If the backend fails to release it
        """
        if self._finalized:
            raise LifecycleError(f"Observer {self.name} already finalized", operation="observer.finalize")
        self._finalized = True
        try:
            self.backend.finalize_observer(self.handle)
        except Exception as e:
            raise wrap_error("observer.finalize", "Observer finalization failed.", e) from e
        logger.debug(f"Observer {self.name} finalized")

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Observer(name={self.name!r}, options={self.options!r}, finalized={self._finalized})"
