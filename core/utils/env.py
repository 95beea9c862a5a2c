"""Common environment helpers used across the backend."""

from __future__ import annotations

import os

from core.exceptions import ConfigurationError

__all__ = ["get_env", "get_flag", "is_lambda_runtime"]

_TRUTHY = {"1", "true", "yes", "on"}


def get_env(key: str, default: str | None = None, *, required: bool = False) -> str | None:
    """Return an environment variable and optionally enforce its presence."""

    value = os.getenv(key, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {key} not set", key=key)
    return value


def get_flag(key: str, default: bool = False) -> bool:
    """Interpret an environment variable as a boolean switch."""

    raw = os.getenv(key)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def is_lambda_runtime() -> bool:
    """True when executing inside an AWS Lambda function."""

    return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))
