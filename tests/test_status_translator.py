"""
Tests for NTSTATUS extraction and delete-failure classification.
"""

import pytest

from share_agent.smb.client import ShareClientError
from share_agent.smb.status_translator import (
    STATUS_DELETE_PENDING,
    STATUS_DIRECTORY_NOT_EMPTY,
    STATUS_OBJECT_NAME_COLLISION,
    STATUS_OBJECT_NAME_NOT_FOUND,
    STATUS_OBJECT_PATH_NOT_FOUND,
    DeleteOutcome,
    classify_delete_failure,
    is_name_collision,
    is_not_found,
    status_code_from_error,
)


class TestStatusCodeFromError:
    def test_structured_status_wins(self):
        error = ShareClientError("boom", status=STATUS_DIRECTORY_NOT_EMPTY)
        assert status_code_from_error(error) == STATUS_DIRECTORY_NOT_EMPTY

    def test_structured_status_preferred_over_text(self):
        error = ShareClientError("failed (0xC0000034)")
        error.status = STATUS_DELETE_PENDING
        assert status_code_from_error(error) == STATUS_DELETE_PENDING

    def test_negative_structured_status_is_masked(self):
        error = ShareClientError("boom")
        error.status = STATUS_OBJECT_NAME_NOT_FOUND - (1 << 32)
        assert status_code_from_error(error) == STATUS_OBJECT_NAME_NOT_FOUND

    def test_text_fallback(self):
        error = RuntimeError("Create failed: STATUS_OBJECT_NAME_COLLISION (0xc0000035)")
        assert status_code_from_error(error) == STATUS_OBJECT_NAME_COLLISION

    def test_no_status_anywhere(self):
        assert status_code_from_error(RuntimeError("connection reset")) is None

    def test_malformed_hex_ignored(self):
        assert status_code_from_error(RuntimeError("failed (0xZZZZ)")) is None


class TestPredicates:
    @pytest.mark.parametrize(
        "status", [STATUS_OBJECT_NAME_NOT_FOUND, STATUS_OBJECT_PATH_NOT_FOUND]
    )
    def test_not_found(self, status):
        assert is_not_found(ShareClientError("open", status=status))

    def test_other_status_is_not_not_found(self):
        assert not is_not_found(ShareClientError("open", status=STATUS_OBJECT_NAME_COLLISION))

    def test_collision(self):
        assert is_name_collision(ShareClientError("create", status=STATUS_OBJECT_NAME_COLLISION))
        assert not is_name_collision(ShareClientError("create"))


class TestClassifyDeleteFailure:
    def test_name_not_found_is_already_gone(self):
        error = ShareClientError("delete", status=STATUS_OBJECT_NAME_NOT_FOUND)
        assert classify_delete_failure(error) == DeleteOutcome.ALREADY_GONE

    def test_delete_pending_is_already_gone(self):
        error = ShareClientError("delete", status=STATUS_DELETE_PENDING)
        assert classify_delete_failure(error) == DeleteOutcome.ALREADY_GONE

    def test_directory_not_empty(self):
        error = ShareClientError("delete", status=STATUS_DIRECTORY_NOT_EMPTY)
        assert classify_delete_failure(error) == DeleteOutcome.DIRECTORY_NOT_EMPTY

    def test_text_only_error_is_classified(self):
        error = RuntimeError("Delete failed (0xC0000101)")
        assert classify_delete_failure(error) == DeleteOutcome.DIRECTORY_NOT_EMPTY

    def test_unknown_is_failed(self):
        assert classify_delete_failure(RuntimeError("access denied")) == DeleteOutcome.FAILED

    def test_path_not_found_is_failed(self):
        """Only the name-level not-found status counts as already deleted."""
        error = ShareClientError("delete", status=STATUS_OBJECT_PATH_NOT_FOUND)
        assert classify_delete_failure(error) == DeleteOutcome.FAILED
