"""Utility helpers shared across core packages.

Kept limited to environment helpers so that importing ``core.utils`` never
pulls in feature modules or AWS clients.
"""

from .env import get_env, get_flag, is_lambda_runtime

__all__ = ["get_env", "get_flag", "is_lambda_runtime"]
