"""Sequential commit of accepted records with local fallback."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Sequence

from .errors import RepositoryError
from .persistence_api import PersistenceApi
from .repository import CommitTier, Repository, StoredEntity
from .schema import EntitySchema
from .validation import ErrorCategory, RowError

logger = logging.getLogger(__name__)

_SERVER_LINE_RE = re.compile(r"^\s*(?:linha|row|line)\s+(\d+)\s*:\s*(.*)$", re.IGNORECASE)


@dataclass
class CommitResult:
    """Counts of where records ended up, plus the rows that failed."""

    remote: int = 0
    local: int = 0
    failures: list[RowError] = field(default_factory=list)
    # Records sent in a bulk import that the server did not store
    rejected: int = 0
    # Messages reported by the server for a bulk import, already rendered
    extra_errors: list[str] = field(default_factory=list)

    @property
    def committed(self) -> int:
        return self.remote + self.local

    def record(self, stored: StoredEntity) -> None:
        if stored.tier is CommitTier.REMOTE:
            self.remote += 1
        else:
            self.local += 1

    def merge(self, other: "CommitResult") -> None:
        self.remote += other.remote
        self.local += other.local
        self.failures.extend(other.failures)
        self.rejected += other.rejected
        self.extra_errors.extend(other.extra_errors)


class BatchCommitter:
    """Persist records one at a time through a repository.

    The repository is normally a FallbackRepository (remote, then local),
    so a row only fails when both stores refuse it.

    Args:
        repository: Where records are created.
        api: Persistence API gateway, needed only for ``commit_bulk``.
        schema: Entity being committed, needed only for ``commit_bulk``.
    """

    def __init__(
        self,
        repository: Repository,
        api: PersistenceApi | None = None,
        schema: EntitySchema | None = None,
    ):
        self.repository = repository
        self.api = api
        self.schema = schema

    async def commit_one(self, record: dict[str, Any], row_index: int) -> StoredEntity | RowError:
        try:
            return await self.repository.store(record)
        except RepositoryError as e:
            logger.error("Row %d could not be stored anywhere: %s", row_index + 1, e)
            return RowError(row_index, f"Could not be saved: {e}", category=ErrorCategory.COMMIT)

    async def commit(
        self,
        records: Sequence[dict[str, Any]],
        row_indexes: Sequence[int] | None = None,
    ) -> CommitResult:
        indexes = list(row_indexes) if row_indexes is not None else list(range(len(records)))
        result = CommitResult()
        for record, row_index in zip(records, indexes):
            outcome = await self.commit_one(record, row_index)
            if isinstance(outcome, RowError):
                result.failures.append(outcome)
            else:
                result.record(outcome)
        return result

    async def commit_bulk(
        self,
        records: Sequence[dict[str, Any]],
        row_indexes: Sequence[int] | None = None,
    ) -> CommitResult:
        """Send all records in one ``/import`` call.

        Falls back to the per-row path when the entity has no batch
        endpoint or the call fails. Records the server refuses are retried
        through the per-row path as well, so they can still be saved
        locally; refusals that name no row are reported as failures.
        """
        if not records:
            return CommitResult()
        if self.api is None or self.schema is None or not self.schema.supports_batch_import:
            return await self.commit(records, row_indexes)

        try:
            body = await self.api.import_many(self.schema.path, list(records))
        except RepositoryError as e:
            logger.warning("Bulk import of %d records failed (%s), committing row by row", len(records), e)
            return await self.commit(records, row_indexes)

        imported = int(body.get("imported") or 0)
        logger.info("Bulk import accepted %d of %d records", imported, len(records))
        result = CommitResult(remote=imported)
        if imported >= len(records):
            return result

        indexes = list(row_indexes) if row_indexes is not None else list(range(len(records)))
        positions, unplaced = split_server_errors(body.get("errors") or [], len(records))
        for position in positions:
            logger.warning(
                "Server refused row %d in bulk import: %s", indexes[position] + 1, "; ".join(positions[position])
            )

        # Rows the server named are retried one by one, remote then local
        retry = sorted(positions)
        if retry:
            result.merge(await self.commit([records[p] for p in retry], [indexes[p] for p in retry]))

        unaccounted = len(records) - imported - len(retry)
        if unaccounted > 0:
            result.rejected = unaccounted
            result.extra_errors = unplaced or [
                f"{unaccounted} of {len(records)} records were not stored by the server"
            ]
        return result


def split_server_errors(
    messages: Sequence[Any],
    count: int,
) -> tuple[dict[int, list[str]], list[str]]:
    """Sort ``Linha N: msg`` messages of a bulk import by record position.

    Returns the messages per 0-based position in the submitted batch, and
    the messages that name no valid position.
    """
    positions: dict[int, list[str]] = {}
    unplaced: list[str] = []
    for message in messages:
        text = str(message)
        match = _SERVER_LINE_RE.match(text)
        position = int(match.group(1)) - 1 if match else -1
        if 0 <= position < count:
            positions.setdefault(position, []).append(match.group(2))
        else:
            unplaced.append(text)
    return positions, unplaced
