"""Print-management tenant API modules.

This package provides the authentication, HTTP client and identity
operations used to talk to the tenant management API.

Classes:
    ClientCredentialsAuthenticator: OAuth2 client credentials exchange
    InteractiveAuthenticator: OAuth2 device authorization login
    Session: Authenticated tenant handle shared by all requests of a run
    PrintClient: HTTP client with typed error mapping
    IdentityManager: Identity assignment on user accounts

Exceptions:
    CardSyncError: Base exception for all card-sync errors
    ConfigurationError: Missing or invalid configuration
    InputError: Input file missing or malformed
    AuthenticationError: Authentication failures
    APIError: API request failures
    NetworkError: Network connectivity issues
"""
from .auth import (
    AuthMode,
    CachedToken,
    ClientCredentialsAuthenticator,
    InteractiveAuthenticator,
    Session,
    normalize_tenant_url,
)
from .client import PrintClient
from .exceptions import (
    FATAL_ERRORS,
    APIError,
    AuthenticationError,
    CardSyncError,
    ConfigurationError,
    ConnectionError,
    InputError,
    InputFileNotFoundError,
    InvalidCredentialsError,
    InvalidTenantUrlError,
    LoginCancelledError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    SchemaError,
    ServerError,
    TimeoutError,
    TokenExpiredError,
    TokenFetchError,
    ValidationError,
)
from .identities import DEFAULT_IDENTITY_TYPE, IdentityManager

__all__ = [
    # Auth
    "AuthMode",
    "CachedToken",
    "ClientCredentialsAuthenticator",
    "InteractiveAuthenticator",
    "Session",
    "normalize_tenant_url",
    # Client
    "PrintClient",
    "IdentityManager",
    "DEFAULT_IDENTITY_TYPE",
    # Exceptions
    "FATAL_ERRORS",
    "CardSyncError",
    "ConfigurationError",
    "InputError",
    "InputFileNotFoundError",
    "SchemaError",
    "AuthenticationError",
    "TokenFetchError",
    "TokenExpiredError",
    "InvalidCredentialsError",
    "LoginCancelledError",
    "InvalidTenantUrlError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
]
