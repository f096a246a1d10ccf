"""Tests for identity domain entities."""

import dataclasses

import pytest

from src.cardsync.identities.domain.entities import (
    BatchResult,
    BatchSummary,
    IdentitySubmissionResult,
    InputRow,
    OperationResult,
    SubmissionStatus,
    ValidationOutcome,
    ValidationStatus,
)


def _result(status, message=None, login="abc1"):
    return IdentitySubmissionResult(login=login, tid="1a2b3c4d", status=status, message=message)


class TestInputRow:
    """Tests for InputRow entity."""

    def test_is_immutable(self):
        row = InputRow(login="abc1", tid="1a2b3c4d", row_number=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            row.login = "xyz1"

    def test_keeps_values_verbatim(self):
        row = InputRow(login=" Abc1 ", tid="1A2B3C4D", row_number=1)
        assert row.login == " Abc1 "
        assert row.tid == "1A2B3C4D"


class TestValidationOutcome:
    """Tests for ValidationOutcome."""

    def test_submission_status_mapping(self):
        row = InputRow(login="abc1", tid="1a2b3c4d", row_number=1)

        assert ValidationOutcome(ValidationStatus.VALID, row).submission_status is None
        assert (
            ValidationOutcome(ValidationStatus.INVALID_CARD_FORMAT, row).submission_status
            == SubmissionStatus.CARD_FORMAT_ERROR
        )
        assert (
            ValidationOutcome(ValidationStatus.INVALID_LOGIN_FORMAT, row).submission_status
            == SubmissionStatus.LOGIN_FORMAT_ERROR
        )


class TestIdentitySubmissionResult:
    """Tests for IdentitySubmissionResult."""

    def test_for_row_copies_row_fields(self):
        row = InputRow(login="abc1", tid="1a2b3c4d", row_number=7)
        result = IdentitySubmissionResult.for_row(row, SubmissionStatus.SUCCESS)

        assert result.login == "abc1"
        assert result.tid == "1a2b3c4d"
        assert result.row_number == 7
        assert result.message is None

    def test_status_label_includes_remote_message(self):
        result = _result(SubmissionStatus.REMOTE_ERROR, message="user not found")
        assert result.status_label == "RemoteError: user not found"

    def test_status_label_plain(self):
        assert _result(SubmissionStatus.CARD_FORMAT_ERROR).status_label == "CardFormatError"
        assert _result(SubmissionStatus.SUCCESS).status_label == "Success"

    def test_succeeded(self):
        assert _result(SubmissionStatus.SUCCESS).succeeded
        assert _result(SubmissionStatus.VALIDATED).succeeded
        assert not _result(SubmissionStatus.REMOTE_ERROR, "x").succeeded
        assert not _result(SubmissionStatus.LOGIN_FORMAT_ERROR).succeeded

    def test_to_dict(self):
        data = _result(SubmissionStatus.REMOTE_ERROR, "boom").to_dict()
        assert data["status"] == "RemoteError"
        assert data["message"] == "boom"


class TestBatchSummary:
    """Tests for BatchSummary derivation."""

    def test_empty(self):
        summary = BatchSummary.from_results([])
        assert summary == BatchSummary(total=0, successes=0, failures=0)

    def test_counts_add_up(self):
        results = [
            _result(SubmissionStatus.SUCCESS),
            _result(SubmissionStatus.SUCCESS),
            _result(SubmissionStatus.CARD_FORMAT_ERROR),
            _result(SubmissionStatus.LOGIN_FORMAT_ERROR),
            _result(SubmissionStatus.REMOTE_ERROR, "500"),
        ]
        summary = BatchSummary.from_results(results)

        assert summary.total == 5
        assert summary.successes == 2
        assert summary.failures == 3
        assert summary.successes + summary.failures == summary.total

    def test_batch_result_failed_keeps_order(self):
        batch = BatchResult(
            results=[
                _result(SubmissionStatus.REMOTE_ERROR, "a", login="first1"),
                _result(SubmissionStatus.SUCCESS, login="middle1"),
                _result(SubmissionStatus.CARD_FORMAT_ERROR, login="last1"),
            ]
        )
        assert [r.login for r in batch.failed] == ["first1", "last1"]
        assert batch.summary.to_dict() == {"total": 3, "successes": 1, "failures": 2}


class TestOperationResult:
    def test_to_dict(self):
        result = OperationResult(
            success=False,
            email="abc1@acme.com",
            identity_type="CardNumber",
            value="1a2b3c4d",
            error="boom",
        )
        assert result.to_dict() == {
            "success": False,
            "email": "abc1@acme.com",
            "identity_type": "CardNumber",
            "value": "1a2b3c4d",
            "error": "boom",
        }
