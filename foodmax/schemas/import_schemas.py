"""Pydantic schemas for the import API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EntityReference(BaseModel):
    """A record another entity can point at (id plus the name users type)."""

    id: int
    display_name: str
    active: bool = True


class ImportResult(BaseModel):
    """Outcome of one import batch. Immutable once returned."""

    model_config = ConfigDict(frozen=True)

    success: bool
    imported: int
    errors: list[str] = Field(default_factory=list)
    message: str
    remote: int = Field(0, description="Rows accepted by the persistence API")
    local: int = Field(0, description="Rows saved locally pending reconciliation")
    duplicates: int = Field(0, description="Rows dropped as duplicates")
    warnings: list[str] = Field(default_factory=list)


class ImportRowsRequest(BaseModel):
    """Rows to import, already parsed from the spreadsheet."""

    rows: list[dict[str, Any]] = Field(
        ...,
        description="One object per spreadsheet row: header label -> cell value",
    )


class ColumnMappingRequest(BaseModel):
    """Headers to preview a mapping for."""

    headers: list[str]


class ColumnMappingResponse(BaseModel):
    """Suggested header -> field key mapping."""

    entity: str
    mapping: dict[str, str]
    unmapped: list[str] = Field(
        default_factory=list,
        description="Headers that matched no field and will be ignored",
    )
    missing_required: list[str] = Field(default_factory=list)


class EntityColumns(BaseModel):
    """Importable entity with its accepted columns."""

    name: str
    label: str
    required: list[str]
    optional: list[str]
    supports_batch_import: bool


class PendingRecordsResponse(BaseModel):
    """Rows saved locally that have not reached the server yet."""

    entity: str
    count: int
    records: list[dict[str, Any]]


class ReconcileResponse(BaseModel):
    """Outcome of replaying locally stored rows against the server."""

    entity: str
    reconciled: int
    remaining: int
    errors: list[str] = Field(default_factory=list)
