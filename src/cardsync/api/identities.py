#!/usr/bin/env python3
"""User Identity Operations for the print-management tenant API.

Architecture:
    IdentityManager handles the single write operation the tool needs:
    attaching an identity (card number, PIN, ...) to a user account.

API Details:
    - Endpoint: POST /api/v1/users/{email}/identities
    - Body: {"type": <identity type>, "value": <identity value>}
    - No dedup: submitting the same value twice sends two requests

Example:
    async with PrintClient() as client:
        manager = IdentityManager(client)
        await manager.assign_identity(session, "jdoe1@example.com", "CardNumber", "1a2b3c4d")
"""
import logging
from typing import Any
from urllib.parse import quote

from .auth import Session
from .client import PrintClient
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_TYPE = "CardNumber"


class IdentityManager:
    """Manage user identities in the tenant.

    Attributes:
        client: PrintClient instance for API communication
    """

    ENDPOINT = "/api/v1/users/{email}/identities"

    def __init__(self, client: PrintClient):
        self.client = client

    async def assign_identity(
        self,
        session: Session,
        email: str,
        identity_type: str,
        value: str,
    ) -> dict[str, Any]:
        """Attach an identity to the user identified by ``email``.

        Args:
            session: Authenticated tenant session
            email: Target user, as ``login@domain``
            identity_type: Identity kind, e.g. "CardNumber"
            value: Identity value, e.g. the card TID

        Returns:
            Parsed JSON reply (empty dict when the API returns no body)

        Raises:
            ValidationError: If email, identity type or value is empty
            APIError: If the API rejects the request
            NetworkError: If the request cannot be delivered
        """
        for field_name, field_value in (
            ("email", email),
            ("identity_type", identity_type),
            ("value", value),
        ):
            if not field_value:
                raise ValidationError(f"{field_name} is required", field=field_name)

        endpoint = self.ENDPOINT.format(email=quote(email, safe="@"))
        payload = {"type": identity_type, "value": value}

        logger.debug(f"Assigning {identity_type} identity to {email}")
        return await self.client.post(session, endpoint, json_body=payload)
