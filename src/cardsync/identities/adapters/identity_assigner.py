"""Tenant IdentityManager adapter.

This adapter wraps the IdentityManager class to implement the
IIdentityAssigner interface.
"""

import logging

from ...api.auth import Session
from ...api.identities import IdentityManager
from ..domain.entities import OperationResult
from ..domain.ports import IIdentityAssigner

logger = logging.getLogger(__name__)


class ApiIdentityAssigner(IIdentityAssigner):
    """Adapter wrapping the existing IdentityManager.

    This adapter:
    - Calls the identity endpoint once per request (no retry)
    - Translates any failure into a failed OperationResult carrying the
      original error text
    """

    def __init__(self, identity_manager: IdentityManager):
        self.manager = identity_manager

    async def assign_identity(
        self,
        session: Session,
        email: str,
        identity_type: str,
        value: str,
    ) -> OperationResult:
        """Assign an identity to a user."""
        try:
            await self.manager.assign_identity(
                session,
                email=email,
                identity_type=identity_type,
                value=value,
            )

            return OperationResult(
                success=True,
                email=email,
                identity_type=identity_type,
                value=value,
            )

        except Exception as e:
            logger.error(f"Failed to assign {identity_type} to {email}: {e}")
            return OperationResult(
                success=False,
                email=email,
                identity_type=identity_type,
                value=value,
                error=str(e),
            )
