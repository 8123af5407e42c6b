"""Pydantic schemas for FoodMax API."""

from foodmax.schemas.import_schemas import (
    ColumnMappingRequest,
    ColumnMappingResponse,
    EntityColumns,
    EntityReference,
    ImportResult,
    ImportRowsRequest,
    PendingRecordsResponse,
    ReconcileResponse,
)

__all__ = [
    "ColumnMappingRequest",
    "ColumnMappingResponse",
    "EntityColumns",
    "EntityReference",
    "ImportResult",
    "ImportRowsRequest",
    "PendingRecordsResponse",
    "ReconcileResponse",
]
