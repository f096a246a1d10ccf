"""Tenant session adapter.

This adapter implements IAuthProvider by picking the authenticator that
matches the requested mode.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable

from ...api.auth import (
    AuthMode,
    ClientCredentialsAuthenticator,
    InteractiveAuthenticator,
    Session,
)
from ...api.exceptions import AuthenticationError, ConfigurationError
from ..domain.ports import IAuthProvider

if TYPE_CHECKING:
    from ...config import AuthSettings

logger = logging.getLogger(__name__)


class ApiAuthProvider(IAuthProvider):
    """Establish a session against the tenant OAuth2 endpoints."""

    def __init__(self, prompt: Callable[[str], Any] = print):
        self._prompt = prompt

    async def establish(self, mode: AuthMode, settings: "AuthSettings") -> Session:
        """Authenticate with the mode chosen by configuration.

        Raises:
            AuthenticationError: If the login or credential exchange fails,
                including a malformed tenant URL or missing credentials
        """
        logger.info(f"Authenticating to {settings.tenant_url} ({mode.value})")

        if mode == AuthMode.INTERACTIVE:
            authenticator = InteractiveAuthenticator(
                tenant_url=settings.tenant_url,
                client_id=settings.interactive_client_id,
                prompt=self._prompt,
            )
        elif mode == AuthMode.CLIENT_CREDENTIALS:
            if not settings.client_id or settings.client_secret is None:
                raise AuthenticationError(
                    "Client credentials mode needs a client ID and secret",
                    cause=ConfigurationError(
                        "Missing client credentials",
                        missing_keys=["CARDSYNC_CLIENT_ID", "CARDSYNC_CLIENT_SECRET"],
                    ),
                )
            authenticator = ClientCredentialsAuthenticator(
                tenant_url=settings.tenant_url,
                client_id=settings.client_id,
                client_secret=settings.client_secret,
            )
            # The authenticator holds the only remaining reference.
            settings.client_secret = None
        else:
            raise AuthenticationError(f"Unsupported authentication mode: {mode!r}")

        session = await authenticator.authenticate()
        logger.info(f"Session established: {session!r}")
        return session
