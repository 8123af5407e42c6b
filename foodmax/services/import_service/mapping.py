"""Column mapping functions for imports."""

import logging
import re
from typing import Any, Mapping

from .converters import fold
from .schema import EntitySchema

logger = logging.getLogger(__name__)


def normalize_header(header: Any) -> str:
    """Comparison form of a header label: trimmed, casefolded, no diacritics."""
    return fold(header)


def slugify_header(header: Any) -> str:
    """Deterministic key for an unknown header ("Observação Extra" -> "observacao_extra")."""
    return re.sub(r"\s+", "_", normalize_header(header))


class HeaderMapper:
    """Translate external column labels into canonical field keys for one entity.

    The lookup table holds the schema's alias table plus each field's key
    and human label, all in comparison form.
    """

    def __init__(self, schema: EntitySchema):
        self.schema = schema
        self._lookup: dict[str, str] = {}
        for spec in schema.fields:
            self._lookup[normalize_header(spec.key)] = spec.key
            self._lookup.setdefault(normalize_header(spec.label), spec.key)
        for alias, key in schema.header_aliases.items():
            self._lookup.setdefault(normalize_header(alias), key)

    def map(self, header: Any) -> str:
        """Return the canonical key for ``header``; never raises.

        Unknown headers fall back to their slug so the value is still
        carried through (and ignored by the normalizer).
        """
        normalized = normalize_header(header)
        if normalized in self._lookup:
            return self._lookup[normalized]
        slug = slugify_header(header)
        logger.debug("Header '%s' not recognised for %s, using '%s'", header, self.schema.name, slug)
        return slug

    def map_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Re-key a raw row. When two headers map to one key the first non-empty value wins."""
        mapped: dict[str, Any] = {}
        for header, value in row.items():
            key = self.map(header)
            current = mapped.get(key)
            if key not in mapped or current is None or (isinstance(current, str) and not current.strip()):
                mapped[key] = value
        return mapped

    def suggest(self, headers: list[str]) -> dict[str, str]:
        return {header: self.map(header) for header in headers}


def suggest_column_mapping(headers: list[str], schema: EntitySchema) -> dict[str, str]:
    """Auto-suggest column mapping based on header names.

    Args:
        headers: List of column header names from the spreadsheet.
        schema: Entity the rows will be imported as.

    Returns:
        Dict mapping header name -> canonical field key (or slug when unknown).
    """
    return HeaderMapper(schema).suggest(headers)
