"""
Harness configuration.

Settings come from environment variables (optionally via a .env file):

    COCOHARNESS_BACKEND=reference
    COCOHARNESS_LOG_LEVEL=warning
    COCOHARNESS_SUITE_INSTANCE="year: 2018"
    COCOHARNESS_BUDGET_MULTIPLIER=100
"""

from typing import Mapping, Optional
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

ENV_PREFIX = "COCOHARNESS_"
LOG_LEVELS = ("error", "warning", "info", "debug")


class HarnessSettings(BaseModel):
    """Validated harness settings."""

    backend: str = Field(default="reference", description="Evaluator backend name")
    log_level: str = Field(default="warning", description="Backend log verbosity")
    suite_instance: str = Field(default="year: 2018", description="Default suite instance selector")
    budget_multiplier: int = Field(default=100, ge=1, description="Evaluations per dimension per problem")

    @field_validator("backend", "log_level", mode="before")
    @classmethod
    def normalize_name(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got '{v}'")
        return v


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> HarnessSettings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)
        dotenv: Load a .env file into os.environ first

    Returns:
        HarnessSettings

    Raises:
        ConfigurationError: If a variable has an invalid value
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    values = {}
    for name in HarnessSettings.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in environ:
            values[name] = environ[key]

    try:
        return HarnessSettings(**values)
    except ValidationError as e:
        raise ConfigurationError("Invalid harness settings", operation="load_settings", original_error=e) from e
