"""Assign Identities use case.

Runs the batch over already-loaded rows:

FOR EACH ROW (in CSV order, strictly sequential)
├── Validate card id, then login (pure, no I/O)
│   └── Invalid -> record CardFormatError / LoginFormatError, next row
├── Report progress (row i of n, login)
├── Assign "{login}@{domain}" the identity (one awaited API call)
└── Record Success or RemoteError(message), next row

Key Design Decisions:
- Every row produces exactly one result; nothing is dropped or repeated
- A row-level failure never stops the loop
- The session is reused for every row, with no re-authentication
- No dedup: duplicate login/tid rows are submitted each time
- The summary is derived from the results, never counted separately
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from ...api.exceptions import ConfigurationError
from ...api.identities import DEFAULT_IDENTITY_TYPE
from ..domain.entities import (
    BatchResult,
    IdentitySubmissionResult,
    InputRow,
    OperationResult,
    SubmissionStatus,
)
from ..domain.ports import IIdentityAssigner
from ..domain.validator import validate

if TYPE_CHECKING:
    from ...api.auth import Session

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, InputRow], None]


def log_progress(index: int, total: int, row: InputRow) -> None:
    logger.info(f"({index}/{total}) Processing {row.login}")


class AssignIdentitiesUseCase:
    """Validate and submit every row, collecting one result per row."""

    def __init__(
        self,
        identity_assigner: Optional[IIdentityAssigner],
        progress: Optional[ProgressCallback] = None,
    ):
        """Initialize the use case.

        Args:
            identity_assigner: Remote assignment port (may be None for dry runs)
            progress: Called after validation and before each remote call
        """
        self.assigner = identity_assigner
        self.progress = progress or log_progress

    async def execute(
        self,
        session: Optional["Session"],
        rows: list[InputRow],
        domain: str,
        identity_type: str = DEFAULT_IDENTITY_TYPE,
        dry_run: bool = False,
    ) -> BatchResult:
        """Execute the batch.

        Args:
            session: Authenticated session (unused when dry_run)
            rows: Input rows in file order
            domain: Email domain appended to each login
            identity_type: Identity kind to assign
            dry_run: Validate only; valid rows are recorded as Validated

        Returns:
            BatchResult with one result per row, in row order

        Raises:
            ConfigurationError: If domain is empty or no assigner is available
        """
        if not domain:
            raise ConfigurationError("An email domain is required", missing_keys=["CARDSYNC_DOMAIN"])
        if not dry_run and (self.assigner is None or session is None):
            raise ConfigurationError("A session and identity assigner are required to submit rows")

        batch = BatchResult(dry_run=dry_run)
        total = len(rows)
        logger.info(f"Processing {total} rows ({'validate only' if dry_run else identity_type})")

        for index, row in enumerate(rows, start=1):
            outcome = validate(row)
            if not outcome.is_valid:
                self._record(batch, IdentitySubmissionResult.for_row(row, outcome.submission_status))
                continue

            self.progress(index, total, row)

            if dry_run:
                self._record(batch, IdentitySubmissionResult.for_row(row, SubmissionStatus.VALIDATED))
                continue

            email = f"{row.login}@{domain}"
            try:
                result = await self.assigner.assign_identity(
                    session,
                    email,
                    identity_type,
                    row.tid,
                )
            except Exception as e:
                # Adapters should not raise; keep the row-level contract if one does.
                logger.error(f"Identity assignment for {email} raised: {e}")
                result = OperationResult(
                    success=False,
                    email=email,
                    identity_type=identity_type,
                    value=row.tid,
                    error=str(e),
                )

            logger.debug(f"Remote result: {result.to_dict()}")
            if result.success:
                self._record(batch, IdentitySubmissionResult.for_row(row, SubmissionStatus.SUCCESS))
            else:
                self._record(
                    batch,
                    IdentitySubmissionResult.for_row(
                        row,
                        SubmissionStatus.REMOTE_ERROR,
                        message=result.error,
                    ),
                )

        summary = batch.summary
        logger.info(
            f"Processed {summary.total} rows: "
            f"{summary.successes} succeeded, "
            f"{summary.failures} failed"
        )
        logger.debug(f"Batch summary: {summary.to_dict()}")
        return batch

    @staticmethod
    def _record(batch: BatchResult, result: IdentitySubmissionResult) -> None:
        logger.debug(f"Row {result.row_number}: {result.to_dict()}")
        batch.results.append(result)
