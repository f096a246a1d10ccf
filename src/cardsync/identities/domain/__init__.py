"""Domain layer for identity assignment.

Contains:
- Entities: Core business objects
- Validator: Pure per-row format checks
- Ports: Interface definitions for infrastructure adapters
"""

from .entities import (
    BatchResult,
    BatchSummary,
    IdentitySubmissionResult,
    InputRow,
    OperationResult,
    ReportingDetail,
    SubmissionStatus,
    ValidationOutcome,
    ValidationStatus,
)
from .ports import (
    IAuthProvider,
    IIdentityAssigner,
    IInputLoader,
    IResultReporter,
)
from .validator import is_valid_card_id, is_valid_login, validate

__all__ = [
    # Entities
    "InputRow",
    "ValidationStatus",
    "ValidationOutcome",
    "SubmissionStatus",
    "IdentitySubmissionResult",
    "BatchSummary",
    "BatchResult",
    "OperationResult",
    "ReportingDetail",
    # Validator
    "validate",
    "is_valid_card_id",
    "is_valid_login",
    # Ports
    "IInputLoader",
    "IAuthProvider",
    "IIdentityAssigner",
    "IResultReporter",
]
