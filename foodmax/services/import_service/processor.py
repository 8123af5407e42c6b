"""Batch processing for imports.

``ImportPipeline`` runs every row through mapping, normalization,
validation, foreign-key resolution, deduplication and commit, one row at
a time, and aggregates the outcome into an ImportResult. Per-row problems
never abort the batch; only an empty or oversized batch does.
"""

import logging
from typing import Any, Iterable, Mapping, Sequence

import httpx

from foodmax.config import Settings, get_settings
from foodmax.schemas.import_schemas import EntityReference, ImportResult

from .aggregator import aggregate
from .committer import BatchCommitter, CommitResult
from .constants import MAX_ROWS
from .deduplication import Deduplicator
from .entities import get_schema
from .errors import BatchTooLargeError, EmptyBatchError, RepositoryError
from .mapping import HeaderMapper
from .normalizer import RecordNormalizer
from .persistence_api import PersistenceApi
from .repository import FallbackRepository, LocalRepository, RemoteRepository, Repository
from .resolver import ForeignKeyResolver, RemoteSearch
from .schema import EntitySchema, ForeignKeySpec
from .validation import ErrorCategory, FieldValidator, RowError, Severity

logger = logging.getLogger(__name__)


class ImportPipeline:
    """Generic import engine for one entity schema.

    Rows are committed as they are accepted, except in bulk mode and for
    schemas with line items, whose rows are collected and committed at the
    end of the batch.

    Args:
        schema: Entity the rows are imported as.
        committer: Stores accepted records.
        api: Persistence API, used to load candidates and existing keys
            when the caller does not supply them, and for remote search.
        resolver: Foreign-key resolver (defaults to first-active fallback).
        normalizer: Record normalizer (defaults to ``+55`` DDI).
        max_rows: Largest accepted batch.
        bulk: Commit through the entity's ``/import`` endpoint when it has one.
    """

    def __init__(
        self,
        schema: EntitySchema,
        committer: BatchCommitter,
        api: PersistenceApi | None = None,
        resolver: ForeignKeyResolver | None = None,
        normalizer: RecordNormalizer | None = None,
        validator: FieldValidator | None = None,
        max_rows: int = MAX_ROWS,
        bulk: bool = False,
    ):
        self.schema = schema
        self.committer = committer
        self.api = api
        self.resolver = resolver or ForeignKeyResolver()
        self.normalizer = normalizer or RecordNormalizer()
        self.validator = validator or FieldValidator()
        self.mapper = HeaderMapper(schema)
        self.max_rows = max_rows
        self.bulk = bulk

    async def run(
        self,
        rows: Sequence[Mapping[str, Any]] | None,
        candidates: Mapping[str, Sequence[EntityReference]] | None = None,
        existing_keys: Iterable[str] | None = None,
    ) -> ImportResult:
        """Import a batch of raw rows.

        Args:
            rows: Parsed spreadsheet rows (header label -> cell value).
            candidates: Known references per foreign-key field. Missing
                fields are loaded from the API.
            existing_keys: Dedupe keys of stored records. Loaded from the
                API when None.

        Raises:
            EmptyBatchError: If ``rows`` is empty or None.
            BatchTooLargeError: If there are more than ``max_rows`` rows.
        """
        if not rows:
            raise EmptyBatchError("No rows to import")
        if len(rows) > self.max_rows:
            raise BatchTooLargeError(len(rows), self.max_rows)

        logger.info("Importing %d %s rows", len(rows), self.schema.name)

        pools = await self._load_candidates(candidates or {})
        if existing_keys is None:
            existing_keys = await self._load_existing_keys()
        deduplicator = Deduplicator(self.schema.key_fn, existing_keys)

        issues: list[RowError] = []
        result = CommitResult()
        queued: list[dict[str, Any]] = []
        queued_indexes: list[int] = []
        lines = self.schema.line_items
        groups: dict[str, dict[str, Any]] = {}

        for index, row in enumerate(rows):
            mapped = self.mapper.map_row(row)
            record = self.normalizer.normalize(mapped, self.schema)

            row_errors = self.validator.validate(record, self.schema, index)
            issues.extend(row_errors)
            if any(e.severity is Severity.ERROR for e in row_errors):
                continue

            # No referenced record is created for a row that is already a duplicate
            if self._creates_references and deduplicator.is_duplicate(record):
                deduplicator.drop(record)
                continue

            fk_errors = await self._resolve_foreign_keys(record, index, pools)
            if fk_errors:
                issues.extend(fk_errors)
                continue

            if lines is not None:
                line = lines.pop_line(record)
                key = deduplicator.key_for(record)
                if key in groups:
                    if line is not None:
                        groups[key][lines.target].append(line)
                    continue
                if not deduplicator.accept(record):
                    continue
                record[lines.target] = [line] if line is not None else []
                if key is not None:
                    groups[key] = record
                queued.append(record)
                queued_indexes.append(index)
                continue

            if not deduplicator.accept(record):
                continue

            if self.bulk:
                queued.append(record)
                queued_indexes.append(index)
                continue

            outcome = await self.committer.commit_one(record, index)
            if isinstance(outcome, RowError):
                result.failures.append(outcome)
            else:
                result.record(outcome)

        if queued and self.bulk:
            result.merge(await self.committer.commit_bulk(queued, queued_indexes))
        elif queued:
            result.merge(await self.committer.commit(queued, queued_indexes))

        return aggregate(result, issues, deduplicator.dropped)

    @property
    def _creates_references(self) -> bool:
        return self.api is not None and any(fk.create_missing for fk in self.schema.foreign_keys)

    async def _resolve_foreign_keys(
        self,
        record: dict[str, Any],
        index: int,
        pools: dict[str, list[EntityReference]],
    ) -> list[RowError]:
        errors: list[RowError] = []
        for fk in self.schema.foreign_keys:
            spec = self.schema.get_field(fk.field)
            label = spec.label if spec else fk.field
            reference = record.get(fk.field)
            if (reference is None or str(reference).strip() == "") and not (spec and spec.required):
                continue

            pool = pools.setdefault(fk.field, [])
            resolution = await self.resolver.resolve_detailed(
                reference,
                pool,
                remote_search=self._remote_search(fk),
                create=self._creator(fk) if fk.create_missing else None,
                fallback=fk.fallback,
            )
            if resolution.created is not None:
                pool.append(resolution.created)

            if resolution.id is None:
                if reference is None or str(reference).strip() == "":
                    message = f"{label} is required"
                else:
                    message = f"{label} '{reference}' could not be resolved"
                errors.append(RowError(index, message, category=ErrorCategory.FOREIGN_KEY))
            else:
                record[fk.field] = resolution.id
        return errors

    def _remote_search(self, fk: ForeignKeySpec) -> RemoteSearch | None:
        if self.api is None:
            return None
        api = self.api
        related = get_schema(fk.entity)

        async def search(term: str) -> list[EntityReference]:
            return await api.search_references(related.path, term, related.display_field)

        return search

    def _creator(self, fk: ForeignKeySpec):
        if self.api is None:
            return None
        api = self.api
        related = get_schema(fk.entity)

        async def create(name: str) -> EntityReference | None:
            try:
                created = await api.create(related.path, {related.display_field: name, "ativo": True})
            except RepositoryError as e:
                logger.warning("Could not create %s '%s': %s", related.name, name, e)
                return None
            return EntityReference(id=created["id"], display_name=name, active=True)

        return create

    async def _load_candidates(
        self,
        supplied: Mapping[str, Sequence[EntityReference]],
    ) -> dict[str, list[EntityReference]]:
        pools: dict[str, list[EntityReference]] = {}
        for fk in self.schema.foreign_keys:
            if fk.field in supplied:
                pools[fk.field] = list(supplied[fk.field])
                continue
            pools[fk.field] = []
            if self.api is None:
                continue
            related = get_schema(fk.entity)
            try:
                pools[fk.field] = await self.api.list_references(related.path, related.display_field)
            except RepositoryError as e:
                logger.warning("Could not load %s for reference lookup: %s", related.name, e)
            logger.debug("Loaded %d %s candidates", len(pools[fk.field]), related.name)
        return pools

    async def _load_existing_keys(self) -> list[str]:
        if self.api is None or self.schema.key_fn is None:
            return []
        try:
            records = await self.api.list_records(self.schema.path)
        except RepositoryError as e:
            logger.warning("Could not load existing %s for duplicate detection: %s", self.schema.name, e)
            return []
        keys = [self.schema.key_fn(record) for record in records]
        return [key for key in keys if key]


def build_repository(
    schema: EntitySchema,
    api: PersistenceApi | None,
    settings: Settings,
) -> Repository:
    """Remote store with local fallback, or local only when the API is disabled."""
    local = LocalRepository(settings.pending_dir, schema.name)
    if api is None or not settings.api_enabled:
        return local
    return FallbackRepository(RemoteRepository(api, schema), local)


def build_pipeline(
    schema: EntitySchema,
    client: httpx.AsyncClient | None,
    settings: Settings | None = None,
    bulk: bool = False,
) -> ImportPipeline:
    """Wire a pipeline for ``schema`` from application settings."""
    settings = settings or get_settings()
    api = PersistenceApi(client, settings.candidate_page_size) if client is not None else None
    if not settings.api_enabled:
        api = None
    repository = build_repository(schema, api, settings)
    return ImportPipeline(
        schema,
        BatchCommitter(repository, api=api, schema=schema),
        api=api,
        resolver=ForeignKeyResolver(settings.fallback_strategy),
        normalizer=RecordNormalizer(settings.default_ddi),
        max_rows=settings.max_rows,
        bulk=bulk,
    )


async def process_import_batch(
    entity: str,
    rows: Sequence[Mapping[str, Any]],
    client: httpx.AsyncClient | None,
    settings: Settings | None = None,
    bulk: bool = False,
) -> ImportResult:
    """Import ``rows`` as ``entity``.

    Args:
        entity: Entity name, e.g. ``"clientes"``.
        rows: Parsed spreadsheet rows.
        client: AsyncClient for the persistence API, or None to store locally.
        settings: Settings to use instead of the global ones.
        bulk: Use the batch endpoint when the entity has one.

    Returns:
        The batch ImportResult.

    Raises:
        UnknownEntityError: If ``entity`` is not importable.
        ImportPipelineError: If the batch is empty or too large.
    """
    schema = get_schema(entity)
    pipeline = build_pipeline(schema, client, settings, bulk=bulk)
    return await pipeline.run(rows)
