#!/usr/bin/env python3
"""Exception Hierarchy for the Card Identity Sync tool.

This module provides a structured exception hierarchy for handling errors
across the print-management API client, the input loader and the CLI.

Design Principles:
    - All exceptions inherit from CardSyncError base class
    - Exceptions preserve context (original error, timestamps, details)
    - Exceptions record whether the cause is transient (network, server)
    - Fatal errors (configuration, input, authentication) abort the run;
      API and network errors during the batch are recorded per row

Exception Hierarchy:
    CardSyncError (base)
    ├── ConfigurationError (fatal - fix CLI flags or environment)
    ├── InputError (fatal - fix the CSV file)
    │   ├── InputFileNotFoundError
    │   └── SchemaError
    ├── AuthenticationError (fatal - no session, no processing)
    │   ├── TokenFetchError
    │   ├── TokenExpiredError
    │   ├── InvalidCredentialsError
    │   ├── LoginCancelledError
    │   └── InvalidTenantUrlError
    ├── APIError (row-level)
    │   ├── RateLimitError
    │   ├── NotFoundError
    │   ├── ValidationError
    │   └── ServerError
    └── NetworkError (row-level during the batch)
        ├── ConnectionError
        └── TimeoutError
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class CardSyncError(Exception):
    """Base exception for all card-sync errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "SCHEMA_ERROR")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether the cause is transient (network or server side)
            rather than a problem with the input or credentials
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Configuration Errors
# ============================================

class ConfigurationError(CardSyncError):
    """Raised when a required setting is missing or settings conflict."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


# ============================================
# Input File Errors
# ============================================

class InputError(CardSyncError):
    """Base class for problems with the CSV input file."""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        kwargs.setdefault("recoverable", False)
        super().__init__(message, details=details, **kwargs)
        self.path = path


class InputFileNotFoundError(InputError):
    """Raised when the input path does not resolve to a readable file."""

    def __init__(self, path: str, **kwargs):
        super().__init__(
            f"Input file not found or not readable: {path}",
            path=path,
            code="INPUT_FILE_NOT_FOUND",
            **kwargs,
        )


class SchemaError(InputError):
    """Raised when the CSV header does not match the required columns.

    Attributes:
        expected: Required column names, in order
        actual: Column names found in the header row
    """

    def __init__(
        self,
        message: str,
        expected: Optional[list[str]] = None,
        actual: Optional[list[str]] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual
        super().__init__(
            message,
            code="SCHEMA_ERROR",
            details=details,
            **kwargs,
        )
        self.expected = expected or []
        self.actual = actual or []


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(CardSyncError):
    """Base class for authentication-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class TokenFetchError(AuthenticationError):
    """Raised when a token cannot be obtained from the tenant."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if status_code:
            details["status_code"] = status_code
        super().__init__(
            message,
            code="TOKEN_FETCH_ERROR",
            details=details,
            **kwargs,
        )
        self.status_code = status_code


class TokenExpiredError(AuthenticationError):
    """Raised when the API rejects the session token (HTTP 401)."""

    def __init__(self, message: str = "Access token has expired", **kwargs):
        super().__init__(message, code="TOKEN_EXPIRED", **kwargs)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the client credentials are rejected."""

    def __init__(
        self,
        message: str = "Invalid client credentials",
        **kwargs,
    ):
        super().__init__(
            message,
            code="INVALID_CREDENTIALS",
            **kwargs,
        )


class LoginCancelledError(AuthenticationError):
    """Raised when the user denies or abandons the interactive login."""

    def __init__(self, message: str = "Interactive login was cancelled", **kwargs):
        super().__init__(message, code="LOGIN_CANCELLED", **kwargs)


class InvalidTenantUrlError(AuthenticationError):
    """Raised when the tenant URL is not an absolute http(s) URL."""

    def __init__(self, url: str, **kwargs):
        details = kwargs.pop("details", {})
        details["url"] = url
        super().__init__(
            f"Malformed tenant URL: {url!r}",
            code="INVALID_TENANT_URL",
            details=details,
            **kwargs,
        )
        self.url = url


# ============================================
# API Errors
# ============================================

class APIError(CardSyncError):
    """Base class for API response errors.

    Attributes:
        status_code: HTTP status code
        endpoint: API endpoint that was called
        response_body: Raw response body (may be truncated)
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        endpoint: Optional[str] = None,
        response_body: Optional[str] = None,
        method: str = "GET",
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        if method:
            details["method"] = method
        if response_body:
            details["response_body"] = response_body[:500] if len(response_body) > 500 else response_body

        kwargs.setdefault("recoverable", status_code in (429, 500, 502, 503, 504))
        kwargs.setdefault("code", f"API_ERROR_{status_code}")

        super().__init__(
            message,
            details=details,
            **kwargs,
        )
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = response_body
        self.method = method


class RateLimitError(APIError):
    """Raised when API rate limit is exceeded (HTTP 429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        **kwargs,
    ):
        kwargs.setdefault("status_code", 429)
        super().__init__(
            message,
            code="RATE_LIMIT_EXCEEDED",
            **kwargs,
        )


class NotFoundError(APIError):
    """Raised when the target user does not exist (HTTP 404)."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"

        kwargs.setdefault("status_code", 404)
        details = kwargs.pop("details", {})
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message,
            code="NOT_FOUND",
            details=details,
            recoverable=False,
            **kwargs,
        )


class ValidationError(APIError):
    """Raised when the API rejects the request payload (HTTP 400/409/422)."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("status_code", 400)
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details=details,
            recoverable=False,
            **kwargs,
        )


class ServerError(APIError):
    """Raised when server returns 5xx error."""

    def __init__(
        self,
        message: str = "Server error",
        **kwargs,
    ):
        kwargs.setdefault("status_code", 500)
        super().__init__(
            message,
            code="SERVER_ERROR",
            recoverable=True,
            **kwargs,
        )


# ============================================
# Network Errors
# ============================================

class NetworkError(CardSyncError):
    """Base class for network-related errors."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)


class ConnectionError(NetworkError):
    """Raised when connection to server fails."""

    def __init__(
        self,
        message: str = "Failed to connect to server",
        host: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if host:
            details["host"] = host
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details=details,
            **kwargs,
        )


class TimeoutError(NetworkError):
    """Raised when request times out."""

    def __init__(
        self,
        message: str = "Request timed out",
        timeout_seconds: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout_seconds:
            details["timeout_seconds"] = timeout_seconds
        super().__init__(
            message,
            code="TIMEOUT_ERROR",
            details=details,
            **kwargs,
        )


# Fatal before the batch starts: the run exits with status 1.
FATAL_ERRORS = (ConfigurationError, InputError, AuthenticationError)
