"""Final ImportResult for a batch."""

import logging
from collections import Counter

from foodmax.schemas.import_schemas import ImportResult

from .committer import CommitResult
from .validation import ErrorCategory, RowError, Severity, render_row_errors

logger = logging.getLogger(__name__)

_CATEGORY_LABELS = {
    ErrorCategory.VALIDATION: "validation errors",
    ErrorCategory.FOREIGN_KEY: "unresolved references",
    ErrorCategory.COMMIT: "storage failures",
}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _failure_message(fatal: list[RowError], dedupe_count: int, extra_errors: list[str]) -> str:
    if not fatal and not extra_errors:
        if dedupe_count:
            return f"Nothing imported: every record was a duplicate ({dedupe_count} skipped)"
        return "Nothing imported"

    counts = Counter(error.category for error in fatal)
    if not counts:
        return "Nothing imported: the server rejected every record"
    dominant, _ = counts.most_common(1)[0]
    return f"Nothing imported: rows failed with {_CATEGORY_LABELS[dominant]}"


def aggregate(
    commit_result: CommitResult,
    validation_errors: list[RowError],
    dedupe_count: int,
) -> ImportResult:
    """Combine per-stage outcomes into the batch result.

    Args:
        commit_result: Where accepted records were stored and which failed.
        validation_errors: Validation and foreign-key problems, warnings included.
        dedupe_count: Rows dropped as duplicates.

    Returns:
        Frozen ImportResult. ``success`` is true when at least one row was
        stored, remotely or locally.
    """
    fatal = [e for e in validation_errors if e.severity is Severity.ERROR]
    fatal.extend(commit_result.failures)
    warnings = [e for e in validation_errors if e.severity is Severity.WARNING]

    errors = render_row_errors(fatal) + list(commit_result.extra_errors)
    remote, local = commit_result.remote, commit_result.local
    imported = remote + local
    failed = len({e.row_index for e in commit_result.failures}) + commit_result.rejected
    accepted = imported + failed

    if imported == 0:
        message = _failure_message(fatal, dedupe_count, commit_result.extra_errors)
    elif remote == accepted:
        message = f"{_plural(remote, 'record')} imported to the server"
    elif remote == 0 and local > 0:
        message = f"{_plural(local, 'record')} saved locally, not yet in the database"
        if failed:
            message += f", {failed} failed"
        message += ". They will be sent when the server is reachable"
    else:
        message = f"{remote} of {accepted} records saved to the server, {local} saved locally, {failed} failed"

    if dedupe_count and imported:
        message += f" ({_plural(dedupe_count, 'duplicate')} skipped)"

    logger.info(
        "Import finished: remote=%d local=%d failed=%d duplicates=%d errors=%d",
        remote,
        local,
        failed,
        dedupe_count,
        len(errors),
    )

    return ImportResult(
        success=imported > 0,
        imported=imported,
        errors=errors,
        message=message,
        remote=remote,
        local=local,
        duplicates=dedupe_count,
        warnings=render_row_errors(warnings),
    )
