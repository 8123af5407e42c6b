"""Declarative description of an importable entity.

An EntitySchema lists the canonical fields of one entity, how each is
coerced, which header labels map to them, which fields reference another
entity, and how two rows of the entity are recognised as the same record.
The pipeline is generic over these objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from . import converters


class FieldKind(str, Enum):
    """How a raw cell is coerced into a canonical value."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    DDI = "ddi"
    CEP = "cep"
    DIGITS = "digits"
    UF = "uf"
    CURRENCY = "currency"
    PERCENT = "percent"
    BOOL = "bool"
    INT = "int"
    DATETIME = "datetime"
    DATE = "date"
    CHOICE = "choice"
    REFERENCE = "reference"


_NORMALIZERS: dict[FieldKind, Callable[[Any], Any]] = {
    FieldKind.TEXT: converters.normalize_text,
    FieldKind.EMAIL: converters.normalize_text,
    FieldKind.PHONE: converters.normalize_phone,
    FieldKind.DDI: converters.normalize_ddi,
    FieldKind.CEP: converters.normalize_digits,
    FieldKind.DIGITS: converters.normalize_digits,
    FieldKind.UF: converters.normalize_uf,
    FieldKind.CURRENCY: converters.normalize_currency,
    FieldKind.PERCENT: converters.normalize_percent,
    FieldKind.BOOL: converters.normalize_bool,
    FieldKind.INT: converters.normalize_int,
    FieldKind.DATETIME: converters.normalize_datetime,
    FieldKind.DATE: converters.normalize_date,
    FieldKind.CHOICE: converters.normalize_text,
    FieldKind.REFERENCE: converters.normalize_reference,
}


@dataclass(frozen=True)
class FieldSpec:
    """One canonical field of an entity."""

    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] = ()
    choice_aliases: Mapping[str, str] = field(default_factory=dict)

    def normalize(self, raw: Any) -> Any:
        """Coerce a raw cell with the normalizer registered for this kind."""
        return _NORMALIZERS[self.kind](raw)


@dataclass(frozen=True)
class ForeignKeySpec:
    """A field whose value references a record of another entity.

    ``fallback`` overrides the configured fallback strategy for this field
    ("first_active" or "none"). With ``create_missing`` an unknown name is
    created in the referenced entity instead of falling back.
    """

    field: str
    entity: str
    fallback: str | None = None
    create_missing: bool = False


@dataclass(frozen=True)
class LineItemSpec:
    """Columns that describe one nested line of a grouped record.

    Spreadsheets flatten a record with nested lines (a menu and its items)
    into one row per line, repeating the parent columns. Rows sharing the
    entity key are folded into the first one: each row contributes the
    line built from ``columns`` to the parent's ``target`` list.

    Args:
        target: Record key holding the list of lines.
        columns: Record key -> key inside the line.
        anchor: Record key that must have a value for the row to carry a line.
    """

    target: str
    columns: Mapping[str, str]
    anchor: str

    def pop_line(self, record: dict[str, Any]) -> dict[str, Any] | None:
        """Remove the line columns from ``record`` and return the line, if any."""
        values = {line_key: record.pop(key, None) for key, line_key in self.columns.items()}
        if values.get(self.columns[self.anchor]) is None:
            return None
        return values


KeyFunction = Callable[[Mapping[str, Any]], str | None]


@dataclass(frozen=True)
class EntitySchema:
    """Everything the pipeline needs to import rows of one entity."""

    name: str
    label: str
    fields: tuple[FieldSpec, ...]
    header_aliases: Mapping[str, str] = field(default_factory=dict)
    key_fn: KeyFunction | None = None
    foreign_keys: tuple[ForeignKeySpec, ...] = ()
    supports_batch_import: bool = False
    display_field: str = "nome"
    api_path: str | None = None
    line_items: LineItemSpec | None = None

    @property
    def path(self) -> str:
        """Resource path on the persistence API, e.g. ``/api/clientes``."""
        return self.api_path or f"/api/{self.name}"

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(spec.key for spec in self.fields)

    @property
    def required_keys(self) -> tuple[str, ...]:
        return tuple(spec.key for spec in self.fields if spec.required)

    @property
    def optional_keys(self) -> tuple[str, ...]:
        return tuple(spec.key for spec in self.fields if not spec.required)

    def get_field(self, key: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None

    def foreign_key_for(self, key: str) -> ForeignKeySpec | None:
        for fk in self.foreign_keys:
            if fk.field == key:
                return fk
        return None
