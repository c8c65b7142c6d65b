"""
Tests for harness settings.
"""

import pytest

from cocoharness.config import HarnessSettings, load_settings
from cocoharness.exceptions import ConfigurationError


class TestSettings:

    def test_defaults(self):
        settings = load_settings(environ={})

        assert settings.backend == "reference"
        assert settings.log_level == "warning"
        assert settings.suite_instance == "year: 2018"
        assert settings.budget_multiplier == 100

    def test_from_environment(self):
        settings = load_settings(
            environ={
                "COCOHARNESS_BACKEND": "CocoEx",
                "COCOHARNESS_LOG_LEVEL": " INFO ",
                "COCOHARNESS_BUDGET_MULTIPLIER": "20",
                "UNRELATED": "x",
            }
        )

        assert settings.backend == "cocoex"
        assert settings.log_level == "info"
        assert settings.budget_multiplier == 20

    def test_os_environ(self, monkeypatch):
        monkeypatch.setenv("COCOHARNESS_SUITE_INSTANCE", "year: 2009")
        assert load_settings().suite_instance == "year: 2009"

    @pytest.mark.parametrize(
        "key,value",
        [("COCOHARNESS_LOG_LEVEL", "verbose"), ("COCOHARNESS_BUDGET_MULTIPLIER", "0")],
    )
    def test_invalid(self, key, value):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(environ={key: value})
        assert exc_info.value.operation == "load_settings"

    def test_model_validation(self):
        with pytest.raises(ValueError):
            HarnessSettings(log_level="loud")
