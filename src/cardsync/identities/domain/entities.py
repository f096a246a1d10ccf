"""Domain entities for identity assignment.

These are pure domain objects with no infrastructure dependencies.
They represent the core business concepts of the card-number batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ValidationStatus(str, Enum):
    """Result tag of the per-row format checks."""

    VALID = "valid"
    INVALID_CARD_FORMAT = "invalid_card_format"
    INVALID_LOGIN_FORMAT = "invalid_login_format"


class SubmissionStatus(str, Enum):
    """Final status of one input row."""

    SUCCESS = "Success"
    CARD_FORMAT_ERROR = "CardFormatError"
    LOGIN_FORMAT_ERROR = "LoginFormatError"
    REMOTE_ERROR = "RemoteError"
    VALIDATED = "Validated"  # Valid row in a validate-only run, nothing submitted

    @property
    def is_success(self) -> bool:
        return self in (SubmissionStatus.SUCCESS, SubmissionStatus.VALIDATED)


class ReportingDetail(str, Enum):
    """How much of a run is reported.

    BASIC_ERRORS_ONLY prints one line per failed row to stderr.
    FULL_RESULTS_LOG writes the whole results table to a log file and
    prints a summary.
    """

    BASIC_ERRORS_ONLY = "basic"
    FULL_RESULTS_LOG = "full"


@dataclass(frozen=True)
class InputRow:
    """A single data row from the CSV file.

    Values are kept exactly as read; row_number is 1-indexed and does not
    count the header.
    """

    login: str
    tid: str
    row_number: int


@dataclass(frozen=True)
class ValidationOutcome:
    """Tagged result of validating an InputRow."""

    status: ValidationStatus
    row: InputRow

    @property
    def is_valid(self) -> bool:
        return self.status == ValidationStatus.VALID

    @property
    def submission_status(self) -> Optional[SubmissionStatus]:
        """Error status to record for an invalid row, None when valid."""
        return _FAILED_VALIDATION_STATUS.get(self.status)


_FAILED_VALIDATION_STATUS = {
    ValidationStatus.INVALID_CARD_FORMAT: SubmissionStatus.CARD_FORMAT_ERROR,
    ValidationStatus.INVALID_LOGIN_FORMAT: SubmissionStatus.LOGIN_FORMAT_ERROR,
}


@dataclass(frozen=True)
class IdentitySubmissionResult:
    """Outcome for one input row. Never mutated after creation."""

    login: str
    tid: str
    status: SubmissionStatus
    row_number: int = 0
    message: Optional[str] = None  # Remote error text, verbatim

    @property
    def succeeded(self) -> bool:
        return self.status.is_success

    @property
    def status_label(self) -> str:
        """Status as shown in reports, e.g. ``RemoteError: user not found``."""
        if self.status == SubmissionStatus.REMOTE_ERROR and self.message:
            return f"{self.status.value}: {self.message}"
        return self.status.value

    @classmethod
    def for_row(
        cls,
        row: InputRow,
        status: SubmissionStatus,
        message: Optional[str] = None,
    ) -> "IdentitySubmissionResult":
        return cls(
            login=row.login,
            tid=row.tid,
            status=status,
            row_number=row.row_number,
            message=message,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for structured logging."""
        return {
            "row_number": self.row_number,
            "login": self.login,
            "tid": self.tid,
            "status": self.status.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class BatchSummary:
    """Totals derived from a result sequence.

    Always built with ``from_results`` so that
    ``successes + failures == total`` holds.
    """

    total: int
    successes: int
    failures: int

    @classmethod
    def from_results(cls, results: list[IdentitySubmissionResult]) -> "BatchSummary":
        successes = sum(1 for r in results if r.succeeded)
        return cls(
            total=len(results),
            successes=successes,
            failures=len(results) - successes,
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "successes": self.successes,
            "failures": self.failures,
        }


@dataclass
class BatchResult:
    """Ordered results of a batch run (insertion order = CSV row order)."""

    results: list[IdentitySubmissionResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def summary(self) -> BatchSummary:
        return BatchSummary.from_results(self.results)

    @property
    def failed(self) -> list[IdentitySubmissionResult]:
        return [r for r in self.results if not r.succeeded]


@dataclass
class OperationResult:
    """Result of one remote identity assignment."""

    success: bool
    email: str
    identity_type: str
    value: str
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for structured logging."""
        return {
            "success": self.success,
            "email": self.email,
            "identity_type": self.identity_type,
            "value": self.value,
            "error": self.error,
        }
