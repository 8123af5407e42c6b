"""Row-level normalization: mapped raw values -> canonical record."""

import logging
from typing import Any, Mapping

from .converters import match_choice, normalize_ddi, normalize_text
from .schema import EntitySchema, FieldKind, FieldSpec

logger = logging.getLogger(__name__)


class RecordNormalizer:
    """Apply each field's normalizer and default to a mapped row.

    Args:
        default_ddi: Country code used when a DDI cell is empty.
    """

    def __init__(self, default_ddi: str = "+55"):
        self.default_ddi = default_ddi

    def normalize_field(self, spec: FieldSpec, raw: Any) -> Any:
        if spec.kind is FieldKind.DDI:
            value = normalize_ddi(raw, self.default_ddi)
        elif spec.kind is FieldKind.CHOICE:
            # Unmatched text is kept so the validator can report it
            value = match_choice(raw, spec.choices, spec.choice_aliases) or normalize_text(raw)
        else:
            value = spec.normalize(raw)

        if value is None:
            return spec.default
        return value

    def normalize(self, raw: Mapping[str, Any], schema: EntitySchema) -> dict[str, Any]:
        """Build the canonical record for ``schema`` from a mapped row.

        Keys outside the schema are ignored; every schema field is present
        in the result, None when undefined and without a default.
        """
        return {spec.key: self.normalize_field(spec, raw.get(spec.key)) for spec in schema.fields}
