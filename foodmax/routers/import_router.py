"""Import endpoints for spreadsheet rows."""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status

from foodmax.config import Settings, get_settings
from foodmax.schemas.import_schemas import (
    ColumnMappingRequest,
    ColumnMappingResponse,
    EntityColumns,
    ImportResult,
    ImportRowsRequest,
    PendingRecordsResponse,
    ReconcileResponse,
)
from foodmax.services.import_service import (
    ENTITY_SCHEMAS,
    BatchTooLargeError,
    EmptyBatchError,
    EntitySchema,
    LocalRepository,
    PersistenceApi,
    RemoteRepository,
    RepositoryError,
    UnknownEntityError,
    build_pipeline,
    get_schema,
    reconcile_pending,
    suggest_column_mapping,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_api_client(request: Request) -> httpx.AsyncClient | None:
    """The persistence API client created in the app lifespan."""
    return getattr(request.app.state, "api_client", None)


ApiClient = Annotated[httpx.AsyncClient | None, Depends(get_api_client)]
AppSettings = Annotated[Settings, Depends(get_settings)]


def _get_schema(entity: str) -> EntitySchema:
    try:
        return get_schema(entity)
    except UnknownEntityError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.get("/entities", response_model=list[EntityColumns])
async def list_entities() -> list[EntityColumns]:
    """List importable entities with their required and optional columns."""
    return [
        EntityColumns(
            name=schema.name,
            label=schema.label,
            required=list(schema.required_keys),
            optional=list(schema.optional_keys),
            supports_batch_import=schema.supports_batch_import,
        )
        for schema in ENTITY_SCHEMAS.values()
    ]


@router.post("/{entity}/mapping", response_model=ColumnMappingResponse)
async def preview_mapping(entity: str, request: ColumnMappingRequest) -> ColumnMappingResponse:
    """Suggest how each spreadsheet header maps to the entity's fields."""
    schema = _get_schema(entity)
    mapping = suggest_column_mapping(request.headers, schema)
    known = set(schema.keys)
    mapped_keys = set(mapping.values())
    return ColumnMappingResponse(
        entity=schema.name,
        mapping=mapping,
        unmapped=[header for header, key in mapping.items() if key not in known],
        missing_required=[key for key in schema.required_keys if key not in mapped_keys],
    )


@router.post("/{entity}", response_model=ImportResult)
async def import_rows(
    entity: str,
    request: ImportRowsRequest,
    client: ApiClient,
    settings: AppSettings,
    bulk: bool = False,
) -> ImportResult:
    """Run the import pipeline over the submitted rows.

    Per-row problems are reported in the result; only an empty or
    oversized batch is rejected outright.
    """
    schema = _get_schema(entity)
    pipeline = build_pipeline(schema, client, settings, bulk=bulk)
    try:
        return await pipeline.run(request.rows)
    except (EmptyBatchError, BatchTooLargeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.get("/{entity}/pending", response_model=PendingRecordsResponse)
async def list_pending(entity: str, settings: AppSettings) -> PendingRecordsResponse:
    """List rows saved locally that have not reached the server yet."""
    schema = _get_schema(entity)
    local = LocalRepository(settings.pending_dir, schema.name)
    try:
        entries = await local.pending()
    except RepositoryError as e:
        logger.error("Cannot read pending %s: %s", schema.name, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return PendingRecordsResponse(entity=schema.name, count=len(entries), records=entries)


@router.post("/{entity}/reconcile", response_model=ReconcileResponse)
async def reconcile(entity: str, client: ApiClient, settings: AppSettings) -> ReconcileResponse:
    """Send locally saved rows to the server and drop the ones it accepts."""
    schema = _get_schema(entity)
    if client is None or not settings.api_enabled:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Persistence API is not configured",
        )
    local = LocalRepository(settings.pending_dir, schema.name)
    remote = RemoteRepository(PersistenceApi(client, settings.candidate_page_size), schema)
    try:
        return await reconcile_pending(local, remote)
    except RepositoryError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
