"""Field validation for canonical records.

Rules are small declarative objects bound to one field. A schema's rule
list is derived from its field specs; ``FieldValidator`` runs every rule
and never stops at the first failure, so a row reports all its problems
at once.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .constants import CEP_DIGITS, PHONE_MAX_DIGITS, PHONE_MIN_DIGITS
from .converters import match_choice
from .schema import EntitySchema, FieldKind

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    FOREIGN_KEY = "foreign_key"
    COMMIT = "commit"


@dataclass(frozen=True)
class RowError:
    """A problem found in one row. ``row_index`` is 0-based."""

    row_index: int
    message: str
    severity: Severity = Severity.ERROR
    category: ErrorCategory = ErrorCategory.VALIDATION

    @property
    def row_number(self) -> int:
        return self.row_index + 1

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.ERROR


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True)
class RequiredRule:
    field: str
    label: str

    def check(self, value: Any, row_index: int) -> RowError | None:
        if _is_missing(value):
            return RowError(row_index, f"{self.label} is required")
        return None


@dataclass(frozen=True)
class EmailRule:
    field: str
    label: str

    def check(self, value: Any, row_index: int) -> RowError | None:
        if _is_missing(value):
            return None
        if not _EMAIL_RE.match(str(value)):
            return RowError(row_index, f"{self.label} '{value}' is not a valid email")
        return None


@dataclass(frozen=True)
class DigitsLengthRule:
    """Length check on a digit string. Only ever a warning."""

    field: str
    label: str
    min_digits: int
    max_digits: int

    def check(self, value: Any, row_index: int) -> RowError | None:
        if _is_missing(value):
            return None
        length = len(str(value))
        if self.min_digits <= length <= self.max_digits:
            return None
        if self.min_digits == self.max_digits:
            expected = f"{self.min_digits}"
        else:
            expected = f"{self.min_digits}-{self.max_digits}"
        return RowError(
            row_index,
            f"{self.label} should have {expected} digits (got {length})",
            severity=Severity.WARNING,
        )


@dataclass(frozen=True)
class ChoiceRule:
    field: str
    label: str
    choices: tuple[str, ...]
    aliases: Mapping[str, str] | None = None

    def check(self, value: Any, row_index: int) -> RowError | None:
        if _is_missing(value) or value in self.choices:
            return None
        if match_choice(value, self.choices, self.aliases) is not None:
            return None
        accepted = ", ".join(self.choices)
        return RowError(row_index, f"{self.label} '{value}' is invalid. Accepted values: {accepted}")


def default_rules(schema: EntitySchema) -> list:
    """Derive the rule list of a schema from its field specs."""
    rules: list = []
    for spec in schema.fields:
        # Reference fields are checked after resolution
        if spec.required and spec.kind is not FieldKind.REFERENCE:
            rules.append(RequiredRule(spec.key, spec.label))
        if spec.kind is FieldKind.EMAIL:
            rules.append(EmailRule(spec.key, spec.label))
        elif spec.kind is FieldKind.CEP:
            rules.append(DigitsLengthRule(spec.key, spec.label, CEP_DIGITS, CEP_DIGITS))
        elif spec.kind is FieldKind.PHONE:
            rules.append(DigitsLengthRule(spec.key, spec.label, PHONE_MIN_DIGITS, PHONE_MAX_DIGITS))
        elif spec.kind is FieldKind.CHOICE and spec.choices:
            rules.append(ChoiceRule(spec.key, spec.label, spec.choices, spec.choice_aliases))
    return rules


class FieldValidator:
    """Run every rule of a schema against a canonical record."""

    def __init__(self) -> None:
        self._rules: dict[str, list] = {}

    def rules_for(self, schema: EntitySchema) -> list:
        if schema.name not in self._rules:
            self._rules[schema.name] = default_rules(schema)
        return self._rules[schema.name]

    def validate(
        self,
        record: Mapping[str, Any],
        schema: EntitySchema,
        row_index: int,
    ) -> list[RowError]:
        errors: list[RowError] = []
        for rule in self.rules_for(schema):
            error = rule.check(record.get(rule.field), row_index)
            if error is not None:
                errors.append(error)
        return errors


def render_row_errors(errors: list[RowError]) -> list[str]:
    """Group errors by row: one ``Row N: msg1; msg2`` string per row, in row order."""
    by_row: dict[int, list[str]] = {}
    for error in errors:
        by_row.setdefault(error.row_index, []).append(error.message)
    return [f"Row {index + 1}: {'; '.join(messages)}" for index, messages in sorted(by_row.items())]
