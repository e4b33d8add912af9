"""Custom exception classes for the proxy functions.

This module provides exception classes that carry the HTTP status code
and structured error body the handlers return to callers.
"""

from __future__ import annotations

from typing import Any
from typing import Iterable
from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    All application-specific exceptions should inherit from this class.
    Each exception carries an HTTP status code and optional details.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code (default 500).
        detail: Optional additional context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response body."""
        result: dict[str, Any] = {"error": self.message}
        if self.detail:
            result["detail"] = self.detail
        return result


class ValidationError(AppError):
    """Raised when input validation fails.

    Use for malformed requests, missing parameters, or invalid
    parameter values in user input.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        detail = f"Field: {field}" if field else None
        super().__init__(message, status_code=400, detail=detail)
        self.field = field


class MethodNotAllowedError(AppError):
    """Raised when a handler receives an HTTP method it does not serve."""

    def __init__(self, method: str, allowed_methods: Iterable[str]):
        super().__init__("Method not allowed", status_code=405)
        self.method = method
        self.allowed_methods = tuple(allowed_methods)


class ConfigurationError(AppError):
    """Raised when required configuration is missing or unusable.

    SECURITY: The public message is always generic. The name of the
    offending setting is kept on the exception for server-side logs
    only and never reaches the response body.
    """

    def __init__(self, config_name: str):
        super().__init__("Server configuration error", status_code=500)
        self.config_name = config_name


class UpstreamError(AppError):
    """Raised when a third-party API answers with a non-2xx status.

    The upstream status code is relayed to the caller together with
    the upstream-provided details.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        details: Any = None,
        include_status: bool = False,
    ):
        super().__init__(message, status_code=status_code)
        self.details = details
        self.include_status = include_status

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.message}
        if self.include_status:
            result["status"] = self.status_code
        result["details"] = self.details
        return result
