#!/usr/bin/env python3
"""HTTP Client for the print-management tenant API.

This client knows HOW to talk to the tenant API (bearer headers from a
Session, JSON bodies, status-code to exception mapping) but not WHAT to
call. Resource knowledge lives in the managers that compose it, such as
``IdentityManager``.

Requests are issued one at a time and are never retried; a failed call is
reported to the caller as a typed exception.

Usage:
    async with PrintClient() as client:
        data = await client.post(session, "/api/v1/users/x@y/identities", {...})
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .auth import Session, read_json
from .exceptions import (
    APIError,
    CardSyncError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    TokenExpiredError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class PrintClient:
    """Async HTTP client for the tenant management API.

    Use as an async context manager so the underlying aiohttp session is
    closed:

        async with PrintClient() as client:
            ...

    Attributes:
        request_timeout: Total seconds allowed per request, or None for no limit
    """

    def __init__(self, request_timeout: Optional[float] = None):
        self.request_timeout = request_timeout
        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "PrintClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=1),
            timeout=aiohttp.ClientTimeout(total=self.request_timeout),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Request Methods
    # ----------------------------------------

    async def _request(
        self,
        session: Session,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a single HTTP request.

        Args:
            session: Authenticated session supplying base URL and token
            method: HTTP method (GET, POST, PUT, DELETE)
            endpoint: API endpoint path
            params: Query parameters
            json_body: JSON request body

        Returns:
            Parsed JSON object, or {} when the reply has no JSON object body

        Raises:
            APIError: If response status is not 2xx
            RuntimeError: If called outside of async context manager
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
        """
        if not self._session:
            raise RuntimeError(
                "PrintClient must be used as async context manager: "
                "async with PrintClient() as client:"
            )

        url = session.url_for(endpoint)
        logger.debug(f"{method} {endpoint}")

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=session.auth_headers,
                params=params,
                json=json_body,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    raise self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=endpoint,
                        response_body=error_text,
                    )

                # Any 2xx is a success; the body is informational only.
                if response.status == 204:
                    return {}
                return await read_json(response)

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {session.tenant_url}",
                host=session.tenant_url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request to {endpoint} timed out",
                timeout_seconds=self.request_timeout,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {endpoint}: {e}",
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
    ) -> CardSyncError:
        """Create appropriate error subclass based on status code."""
        if status == 401:
            return TokenExpiredError(
                "Access token expired or invalid",
                details={"endpoint": endpoint, "status_code": status},
            )

        if status == 404:
            return NotFoundError(
                resource_type="Resource",
                resource_id=endpoint,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status == 429:
            return RateLimitError(
                f"Rate limit exceeded for {endpoint}",
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status in (400, 409, 422):
            return ValidationError(
                f"Validation failed for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        if status >= 500:
            return ServerError(
                f"Server error ({status}) for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                method=method,
                response_body=response_body,
            )

        return APIError(
            f"{method} {endpoint} failed",
            status_code=status,
            endpoint=endpoint,
            method=method,
            response_body=response_body,
        )

    async def post(
        self,
        session: Session,
        endpoint: str,
        json_body: dict,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a POST request."""
        return await self._request(session, "POST", endpoint, params=params, json_body=json_body)
