"""Import service package: turning spreadsheet rows into FoodMax records."""

from .aggregator import aggregate
from .committer import BatchCommitter, CommitResult
from .constants import MAX_ROWS
from .converters import (
    decode_scientific,
    match_choice,
    normalize_bool,
    normalize_currency,
    normalize_date,
    normalize_datetime,
    normalize_ddi,
    normalize_percent,
    normalize_phone,
)
from .deduplication import Deduplicator, composite_key, dedupe, tax_id_or_name_key
from .entities import ENTITY_SCHEMAS, get_schema
from .errors import (
    BatchTooLargeError,
    EmptyBatchError,
    ImportPipelineError,
    RepositoryError,
    UnknownEntityError,
)
from .mapping import HeaderMapper, suggest_column_mapping
from .normalizer import RecordNormalizer
from .persistence_api import PersistenceApi, create_api_client
from .processor import ImportPipeline, build_pipeline, build_repository, process_import_batch
from .reconcile import reconcile_pending
from .repository import (
    CommitTier,
    FallbackRepository,
    LocalRepository,
    RemoteRepository,
    Repository,
    StoredEntity,
)
from .resolver import FallbackStrategy, ForeignKeyResolver, Resolution, ResolutionTier
from .schema import EntitySchema, FieldKind, FieldSpec, ForeignKeySpec, LineItemSpec
from .validation import (
    ChoiceRule,
    DigitsLengthRule,
    EmailRule,
    ErrorCategory,
    FieldValidator,
    RequiredRule,
    RowError,
    Severity,
)

__all__ = [
    # Constants
    "MAX_ROWS",
    # Schemas
    "ENTITY_SCHEMAS",
    "EntitySchema",
    "FieldKind",
    "FieldSpec",
    "ForeignKeySpec",
    "LineItemSpec",
    "get_schema",
    # Mapping
    "HeaderMapper",
    "suggest_column_mapping",
    # Converters
    "RecordNormalizer",
    "decode_scientific",
    "match_choice",
    "normalize_bool",
    "normalize_currency",
    "normalize_date",
    "normalize_datetime",
    "normalize_ddi",
    "normalize_percent",
    "normalize_phone",
    # Validation
    "ChoiceRule",
    "DigitsLengthRule",
    "EmailRule",
    "ErrorCategory",
    "FieldValidator",
    "RequiredRule",
    "RowError",
    "Severity",
    # Resolution
    "FallbackStrategy",
    "ForeignKeyResolver",
    "Resolution",
    "ResolutionTier",
    # Deduplication
    "Deduplicator",
    "composite_key",
    "dedupe",
    "tax_id_or_name_key",
    # Persistence
    "CommitTier",
    "FallbackRepository",
    "LocalRepository",
    "PersistenceApi",
    "RemoteRepository",
    "Repository",
    "StoredEntity",
    "create_api_client",
    "reconcile_pending",
    # Commit and results
    "BatchCommitter",
    "CommitResult",
    "aggregate",
    # Processor
    "ImportPipeline",
    "build_pipeline",
    "build_repository",
    "process_import_batch",
    # Errors
    "BatchTooLargeError",
    "EmptyBatchError",
    "ImportPipelineError",
    "RepositoryError",
    "UnknownEntityError",
]
