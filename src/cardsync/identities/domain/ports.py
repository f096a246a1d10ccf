"""Port interfaces for identity assignment.

These are abstract interfaces (ports) that define how the domain
interacts with external systems. Concrete implementations (adapters)
are provided in the adapters module.

This follows the Hexagonal Architecture pattern.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from .entities import BatchResult, InputRow, OperationResult

if TYPE_CHECKING:
    from ...api.auth import AuthMode, Session
    from ...config import AuthSettings


class IInputLoader(ABC):
    """Port for reading the input rows."""

    @abstractmethod
    def load(self, path: Union[str, Path]) -> list[InputRow]:
        """Read all data rows from the input file.

        Args:
            path: Path to the CSV file

        Returns:
            Rows in file order, 1-indexed

        Raises:
            InputFileNotFoundError: If the path is not a readable file
            SchemaError: If the header is not exactly login, tid
        """
        ...


class IAuthProvider(ABC):
    """Port for establishing the tenant session."""

    @abstractmethod
    async def establish(self, mode: "AuthMode", settings: "AuthSettings") -> "Session":
        """Obtain an authenticated session.

        Args:
            mode: Interactive or client credentials
            settings: Tenant URL and credentials for the chosen mode

        Returns:
            Session reused for every row of the run

        Raises:
            AuthenticationError: On any failure; the run cannot continue
        """
        ...


class IIdentityAssigner(ABC):
    """Port for the remote identity-assignment operation.

    Implementations report failures through OperationResult instead of
    raising, so one bad row never stops the batch.
    """

    @abstractmethod
    async def assign_identity(
        self,
        session: "Session",
        email: str,
        identity_type: str,
        value: str,
    ) -> OperationResult:
        """Attach an identity to a user.

        Args:
            session: Authenticated tenant session
            email: Target user as login@domain
            identity_type: Identity kind, e.g. "CardNumber"
            value: Identity value (card TID)

        Returns:
            OperationResult with success status and error text on failure
        """
        ...


class IResultReporter(ABC):
    """Port for rendering the outcome of a batch."""

    @abstractmethod
    def report(self, batch: BatchResult) -> Optional[Path]:
        """Emit the per-row results and, where supported, the summary.

        Args:
            batch: Results of the run

        Returns:
            Path of the written results file, if any
        """
        ...
