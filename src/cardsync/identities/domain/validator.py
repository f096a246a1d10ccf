"""Row format checks.

Pure functions: no I/O, never raise. The card id is checked before the
login, so a row failing both is reported as a card format error.
"""

import re

from .entities import InputRow, ValidationOutcome, ValidationStatus

# Exactly 8 hex characters.
CARD_ID_PATTERN = re.compile(r"[0-9a-fA-F]{8}")

# 3 to 7 ASCII letters followed by exactly one digit.
LOGIN_PATTERN = re.compile(r"[a-zA-Z]{3,7}[0-9]")


def is_valid_card_id(tid: str) -> bool:
    return CARD_ID_PATTERN.fullmatch(tid or "") is not None


def is_valid_login(login: str) -> bool:
    return LOGIN_PATTERN.fullmatch(login or "") is not None


def validate(row: InputRow) -> ValidationOutcome:
    """Classify a row as valid or by its first failing check.

    Examples:
        InputRow("abc1", "1a2b3c4d", 1)   -> VALID
        InputRow("abc1", "1a2b3c4g", 1)   -> INVALID_CARD_FORMAT
        InputRow("ab1", "1a2b3c4d", 1)    -> INVALID_LOGIN_FORMAT
        InputRow("ab1", "bad", 1)         -> INVALID_CARD_FORMAT
    """
    if not is_valid_card_id(row.tid):
        return ValidationOutcome(ValidationStatus.INVALID_CARD_FORMAT, row)
    if not is_valid_login(row.login):
        return ValidationOutcome(ValidationStatus.INVALID_LOGIN_FORMAT, row)
    return ValidationOutcome(ValidationStatus.VALID, row)
