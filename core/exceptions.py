"""Custom Exception Hierarchy for the broadcast backend
This module defines a typed exception hierarchy that enables precise error
handling and consistent status codes across the entry points.

Exception Handling Flow:
    1. Registry or handler code raises a typed exception
    2. LifecycleHandler catches it for the event being processed
    3. The handler converts it to a ``(status_code, body)`` response
    4. The transport returns the response to the caller
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service layer errors."""


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class MalformedPayloadError(ValidationError):
    """Raised when a post body cannot be decoded into the expected envelope."""


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, key: str | None = None):
        self.message = message
        self.key = key
        super().__init__(self.message)


class StoreUnavailableError(ServiceError):
    """Raised when the connection store cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.operation = operation
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message}: {self.original_error}"
        return self.message
