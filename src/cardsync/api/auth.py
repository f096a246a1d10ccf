#!/usr/bin/env python3
"""OAuth2 Session Establishment for the print-management tenant API.

This module turns operator credentials into an authenticated Session that
the identity batch reuses for every row. Two mutually exclusive modes:

    - Client credentials: non-interactive ``client_credentials`` grant
      against the tenant token endpoint.
    - Interactive: OAuth2 device authorization grant. The operator is shown
      a verification URL and code (the browser is opened when possible) and
      the tool polls the token endpoint until the login completes, is
      denied, or the device code expires.

Security Notes:
    - Client secrets are pydantic ``SecretStr`` values; the plain text is
      only read while building the token request body
    - Tokens are held in memory only (never persisted to disk)
    - Logs identify tokens by a SHA-256 prefix, never the token itself

Example:
    >>> auth = ClientCredentialsAuthenticator(
    ...     tenant_url="https://acme.printcloud.example",
    ...     client_id="worker",
    ...     client_secret=SecretStr("s3cret"),
    ... )
    >>> session = await auth.authenticate()
    >>> session.auth_headers["Authorization"]
"""
import asyncio
import hashlib
import logging
import time
import webbrowser
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

import aiohttp
from pydantic import SecretStr

from .exceptions import (
    AuthenticationError,
    ConnectionError,
    InvalidCredentialsError,
    InvalidTenantUrlError,
    LoginCancelledError,
    NetworkError,
    TimeoutError,
    TokenFetchError,
)

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "/oauth/token"
DEVICE_CODE_ENDPOINT = "/oauth/device/code"
DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"

# Public client registered for the interactive (device code) login.
INTERACTIVE_CLIENT_ID = "cardsync-cli"

AUTH_TIMEOUT_SECONDS = 30


class AuthMode(str, Enum):
    """How the session is obtained."""

    INTERACTIVE = "interactive"
    CLIENT_CREDENTIALS = "client_credentials"


@dataclass
class CachedToken:
    """Container for an OAuth2 access token.

    Attributes:
        access_token: The OAuth2 bearer token string.
        expires_at: Unix timestamp when the token expires.
        token_type: Token type, typically "Bearer".
        expires_in: Original TTL in seconds.
    """
    access_token: str
    expires_at: float
    token_type: Optional[str] = "Bearer"
    expires_in: int = 3600

    @property
    def token_id(self) -> str:
        """Get a safe identifier for logging (SHA-256 hash, first 8 chars)."""
        return hashlib.sha256(self.access_token.encode()).hexdigest()[:8]

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "CachedToken":
        """Build a token from a token endpoint JSON reply.

        Raises:
            TokenFetchError: If the reply has no access_token or a bad expires_in
        """
        access_token = data.get("access_token")
        if not access_token:
            raise TokenFetchError(
                "Token response missing access_token",
                status_code=200,
                details={"response_keys": list(data.keys())},
            )
        expires_in = int_field(data, "expires_in", 3600)
        return cls(
            access_token=access_token,
            expires_at=time.time() + expires_in,
            token_type=data.get("token_type") or "Bearer",
            expires_in=expires_in,
        )


@dataclass
class Session:
    """Authenticated handle to one tenant.

    Owned by a single pipeline run and never persisted. ``repr`` only shows
    the token id so a session can be logged safely.
    """

    tenant_url: str
    token: CachedToken = field(repr=False)
    mode: AuthMode = AuthMode.CLIENT_CREDENTIALS

    @property
    def auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"{self.token.token_type or 'Bearer'} {self.token.access_token}",
            "Content-Type": "application/json",
        }

    def url_for(self, endpoint: str) -> str:
        return f"{self.tenant_url}{endpoint}"

    def __repr__(self) -> str:
        return (
            f"Session(tenant_url={self.tenant_url!r}, "
            f"mode={self.mode.value}, token_id={self.token.token_id})"
        )


def normalize_tenant_url(url: Optional[str]) -> str:
    """Validate a tenant URL and strip any trailing slash.

    Raises:
        InvalidTenantUrlError: If the URL is empty, not http(s), or has no host
    """
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidTenantUrlError(candidate)
    return candidate.rstrip("/")


async def read_json(response: aiohttp.ClientResponse) -> dict[str, Any]:
    """Parse a JSON object body; anything else (empty, plain text, a list) gives {}."""
    try:
        data = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def int_field(data: dict[str, Any], key: str, default: int) -> int:
    """Read an integer field from a token server reply.

    Raises:
        TokenFetchError: If the value is null or not a number
    """
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise TokenFetchError(
            f"Token server sent an invalid {key}: {value!r}",
            details={"field": key},
            cause=e,
        )


def _network_error(exc: Exception, url: str) -> NetworkError:
    """Translate an aiohttp failure into the typed network errors."""
    if isinstance(exc, aiohttp.ClientConnectionError):
        return ConnectionError(
            f"Failed to connect to token server: {exc}",
            host=url,
            cause=exc,
        )
    if isinstance(exc, asyncio.TimeoutError):
        return TimeoutError(
            "Token request timed out",
            timeout_seconds=AUTH_TIMEOUT_SECONDS,
            cause=exc,
        )
    return NetworkError(f"Network error during authentication: {exc}", cause=exc)


class ClientCredentialsAuthenticator:
    """Non-interactive OAuth2 client credentials exchange.

    Attributes:
        tenant_url: Normalized tenant base URL
        client_id: OAuth2 client ID
    """

    def __init__(
        self,
        tenant_url: str,
        client_id: str,
        client_secret: SecretStr,
    ):
        self.tenant_url = normalize_tenant_url(tenant_url)
        self.client_id = client_id
        self._client_secret = client_secret

    async def authenticate(self) -> Session:
        """Exchange the client credentials for a session.

        Returns:
            Session bound to the tenant

        Raises:
            InvalidCredentialsError: If the tenant rejects the credentials (401)
            TokenFetchError: For any other non-200 reply or a reply without a token
            AuthenticationError: Wrapping connection, timeout and network failures
        """
        token_url = f"{self.tenant_url}{TOKEN_ENDPOINT}"
        payload = {
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self._client_secret.get_secret_value(),
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            async with aiohttp.ClientSession() as http:
                async with http.post(
                    token_url,
                    data=payload,
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=AUTH_TIMEOUT_SECONDS),
                ) as response:
                    if response.status == 200:
                        token = CachedToken.from_response(await read_json(response))
                        logger.info(
                            f"Token fetched (id={token.token_id}), expires in {token.expires_in}s"
                        )
                        return Session(
                            tenant_url=self.tenant_url,
                            token=token,
                            mode=AuthMode.CLIENT_CREDENTIALS,
                        )

                    error_text = await response.text()
                    if response.status == 401:
                        raise InvalidCredentialsError(
                            "Invalid client credentials",
                            details={"response": error_text[:200]},
                        )
                    raise TokenFetchError(
                        f"Token server returned HTTP {response.status}",
                        status_code=response.status,
                        details={"response": error_text[:200]},
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            cause = _network_error(e, token_url)
            raise AuthenticationError(
                f"Client credential exchange failed: {cause.message}",
                code="AUTH_NETWORK_ERROR",
                cause=cause,
            ) from e
        finally:
            # Only needed for the exchange above.
            self._client_secret = SecretStr("")


@dataclass
class DeviceAuthorization:
    """Reply from the device authorization endpoint."""

    device_code: str
    user_code: str
    verification_uri: str
    verification_uri_complete: Optional[str] = None
    expires_in: int = 600
    interval: int = 5

    @property
    def browser_url(self) -> str:
        return self.verification_uri_complete or self.verification_uri


class InteractiveAuthenticator:
    """Interactive login using the OAuth2 device authorization grant.

    The pipeline is suspended in ``authenticate()`` until the operator
    finishes the login in a browser, denies it, or the code expires.
    """

    SLOW_DOWN_INCREMENT = 5

    def __init__(
        self,
        tenant_url: str,
        client_id: str = INTERACTIVE_CLIENT_ID,
        open_browser: Callable[[str], Any] = webbrowser.open,
        prompt: Callable[[str], Any] = print,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.tenant_url = normalize_tenant_url(tenant_url)
        self.client_id = client_id
        self._open_browser = open_browser
        self._prompt = prompt
        self._sleep = sleep

    async def authenticate(self) -> Session:
        """Run the device login and return a session.

        Raises:
            LoginCancelledError: If the operator denies the login
            TokenFetchError: If the device code expires or the tenant errors
            AuthenticationError: Wrapping connection, timeout and network failures
        """
        try:
            async with aiohttp.ClientSession() as http:
                grant = await self._request_device_code(http)
                self._announce(grant)
                token = await self._poll_for_token(http, grant)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            cause = _network_error(e, self.tenant_url)
            raise AuthenticationError(
                f"Interactive login failed: {cause.message}",
                code="AUTH_NETWORK_ERROR",
                cause=cause,
            ) from e

        logger.info(f"Interactive login complete (id={token.token_id})")
        return Session(
            tenant_url=self.tenant_url,
            token=token,
            mode=AuthMode.INTERACTIVE,
        )

    async def _request_device_code(self, http: aiohttp.ClientSession) -> DeviceAuthorization:
        url = f"{self.tenant_url}{DEVICE_CODE_ENDPOINT}"
        async with http.post(
            url,
            data={"client_id": self.client_id},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=aiohttp.ClientTimeout(total=AUTH_TIMEOUT_SECONDS),
        ) as response:
            data = await read_json(response)
            if response.status != 200 or "device_code" not in data:
                raise TokenFetchError(
                    f"Device authorization request failed with HTTP {response.status}",
                    status_code=response.status,
                    details={"error": data.get("error")},
                )

        return DeviceAuthorization(
            device_code=data["device_code"],
            user_code=data.get("user_code", ""),
            verification_uri=data.get("verification_uri", ""),
            verification_uri_complete=data.get("verification_uri_complete"),
            expires_in=int_field(data, "expires_in", 600),
            interval=int_field(data, "interval", 5),
        )

    def _announce(self, grant: DeviceAuthorization) -> None:
        self._prompt("")
        self._prompt("To sign in, open the following URL in a browser:")
        self._prompt(f"    {grant.verification_uri}")
        self._prompt(f"and enter the code: {grant.user_code}")
        self._prompt("")
        try:
            self._open_browser(grant.browser_url)
        except webbrowser.Error as e:
            logger.debug(f"Could not open a browser: {e}")

    async def _poll_for_token(
        self,
        http: aiohttp.ClientSession,
        grant: DeviceAuthorization,
    ) -> CachedToken:
        token_url = f"{self.tenant_url}{TOKEN_ENDPOINT}"
        payload = {
            "grant_type": DEVICE_CODE_GRANT,
            "device_code": grant.device_code,
            "client_id": self.client_id,
        }
        interval = grant.interval
        deadline = time.monotonic() + grant.expires_in

        while time.monotonic() < deadline:
            await self._sleep(interval)

            async with http.post(
                token_url,
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=aiohttp.ClientTimeout(total=AUTH_TIMEOUT_SECONDS),
            ) as response:
                data = await read_json(response)
                if response.status == 200:
                    return CachedToken.from_response(data)

            error = data.get("error")
            if error == "authorization_pending":
                continue
            if error == "slow_down":
                interval += self.SLOW_DOWN_INCREMENT
                logger.debug(f"Token endpoint asked to slow down, polling every {interval}s")
                continue
            if error == "access_denied":
                raise LoginCancelledError()
            if error == "expired_token":
                raise TokenFetchError("Login code expired before sign-in completed")
            raise TokenFetchError(
                f"Interactive login failed: {error or f'HTTP {response.status}'}",
                status_code=response.status,
                details={"error_description": data.get("error_description")},
            )

        raise TokenFetchError("Login code expired before sign-in completed")
