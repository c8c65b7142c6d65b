"""Shared fixtures for the harness tests."""

import pytest

from cocoharness import runtime
from cocoharness.backends import ReferenceBackend


@pytest.fixture
def backend():
    """Fresh reference backend, independent of the process-wide one."""
    return ReferenceBackend()


@pytest.fixture(autouse=True)
def clean_runtime(monkeypatch):
    """Detach the process-wide backend and isolate settings from the environment."""
    for key in ("BACKEND", "LOG_LEVEL", "SUITE_INSTANCE", "BUDGET_MULTIPLIER"):
        monkeypatch.delenv(f"COCOHARNESS_{key}", raising=False)
    monkeypatch.setattr("cocoharness.config.load_dotenv", lambda *args, **kwargs: False)
    runtime.reset()
    yield
    runtime.reset()
