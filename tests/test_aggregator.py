"""Unit tests for batch result aggregation."""

import pytest
from pydantic import ValidationError

from foodmax.services.import_service import CommitResult, aggregate
from foodmax.services.import_service.validation import ErrorCategory, RowError, Severity


def test_all_remote() -> None:
    """Test a fully remote batch reports server import."""
    result = aggregate(CommitResult(remote=3), [], 0)
    assert result.success is True
    assert result.imported == 3
    assert result.message == "3 records imported to the server"
    assert result.errors == []


def test_all_local() -> None:
    """Test a fully local batch says the records are not yet in the database."""
    result = aggregate(CommitResult(local=2), [], 0)
    assert result.success is True
    assert result.imported == 2
    assert result.message.startswith("2 records saved locally, not yet in the database")


def test_local_with_failures_keeps_local_warning() -> None:
    """Test failed rows do not hide that nothing reached the server."""
    commit = CommitResult(
        local=2,
        failures=[RowError(2, "Could not be saved: disk full", category=ErrorCategory.COMMIT)],
    )
    result = aggregate(commit, [], 0)
    assert result.message == (
        "2 records saved locally, not yet in the database, 1 failed. "
        "They will be sent when the server is reachable"
    )
    assert result.errors == ["Row 3: Could not be saved: disk full"]


def test_mixed_tiers_and_failures() -> None:
    """Test a partial batch gives the breakdown of where rows went."""
    commit = CommitResult(
        remote=2,
        local=1,
        failures=[RowError(4, "Could not be saved: disk full", category=ErrorCategory.COMMIT)],
    )
    result = aggregate(commit, [RowError(1, "Nome is required")], 0)

    assert result.imported == 3
    assert result.message == "2 of 4 records saved to the server, 1 saved locally, 1 failed"
    assert result.errors == ["Row 2: Nome is required", "Row 5: Could not be saved: disk full"]


def test_warnings_reported_separately() -> None:
    """Test warnings do not count as errors."""
    warning = RowError(0, "CEP should have 8 digits (got 3)", severity=Severity.WARNING)
    result = aggregate(CommitResult(remote=1), [warning], 0)
    assert result.errors == []
    assert result.warnings == ["Row 1: CEP should have 8 digits (got 3)"]


def test_duplicates_appended_to_message() -> None:
    """Test skipped duplicates are mentioned."""
    result = aggregate(CommitResult(remote=1), [], 2)
    assert result.duplicates == 2
    assert result.message == "1 record imported to the server (2 duplicates skipped)"


def test_nothing_imported_names_dominant_category() -> None:
    """Test a fully failed batch explains what went wrong."""
    errors = [
        RowError(0, "Estabelecimento 'X' could not be resolved", category=ErrorCategory.FOREIGN_KEY),
        RowError(1, "Estabelecimento 'Y' could not be resolved", category=ErrorCategory.FOREIGN_KEY),
        RowError(2, "Nome is required"),
    ]
    result = aggregate(CommitResult(), errors, 0)
    assert result.success is False
    assert result.imported == 0
    assert result.message == "Nothing imported: rows failed with unresolved references"
    assert len(result.errors) == 3


def test_nothing_imported_only_duplicates() -> None:
    """Test a batch of duplicates is not a success."""
    result = aggregate(CommitResult(), [], 4)
    assert result.success is False
    assert "duplicate" in result.message


def test_bulk_rejections_count_as_failed() -> None:
    """Test records the server silently dropped show up in the totals."""
    commit = CommitResult(remote=3, rejected=2, extra_errors=["Row 4: CNPJ already registered"])
    result = aggregate(commit, [], 0)
    assert result.message == "3 of 5 records saved to the server, 0 saved locally, 2 failed"
    assert result.errors == ["Row 4: CNPJ already registered"]


def test_result_is_frozen() -> None:
    """Test the result cannot be changed after aggregation."""
    result = aggregate(CommitResult(remote=1), [], 0)
    with pytest.raises(ValidationError):
        result.imported = 5
