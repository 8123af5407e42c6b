"""Duplicate detection within a batch and against existing data."""

import logging
from typing import Any, Callable, Iterable, Mapping

from .converters import fold, only_digits

logger = logging.getLogger(__name__)

KeyFunction = Callable[[Mapping[str, Any]], str | None]


def _part(value: Any) -> str:
    return fold(value)


def tax_id_or_name_key(record: Mapping[str, Any]) -> str | None:
    """``cnpj:<digits>`` when the record has a tax id, else ``nome:<name>``."""
    cnpj = only_digits(record.get("cnpj"))
    if cnpj:
        return f"cnpj:{cnpj}"
    name = _part(record.get("nome"))
    return f"nome:{name}" if name else None


def composite_key(*fields: str) -> KeyFunction:
    """Key function joining the folded values of ``fields``.

    Returns None (never a duplicate) when every part is empty.
    """

    def key_fn(record: Mapping[str, Any]) -> str | None:
        parts = [_part(record.get(f)) for f in fields]
        if not any(parts):
            return None
        return "|".join(parts)

    return key_fn


class Deduplicator:
    """Stateful first-occurrence-wins filter used by the per-row pipeline.

    Args:
        key_fn: Computes a record's key from canonical values; None means
            the entity has no notion of duplicates.
        existing_keys: Keys of records already stored.
    """

    def __init__(self, key_fn: KeyFunction | None, existing_keys: Iterable[str] = ()):
        self.key_fn = key_fn
        self.existing = {k.casefold() for k in existing_keys if k}
        self.seen: set[str] = set()
        self.dropped = 0

    def key_for(self, record: Mapping[str, Any]) -> str | None:
        if self.key_fn is None:
            return None
        key = self.key_fn(record)
        return key.casefold() if key else None

    def is_duplicate(self, record: Mapping[str, Any]) -> bool:
        """True if the record collides with stored data or an accepted row."""
        key = self.key_for(record)
        return key is not None and (key in self.existing or key in self.seen)

    def drop(self, record: Mapping[str, Any]) -> None:
        self.dropped += 1
        logger.debug("Dropping duplicate record with key '%s'", self.key_for(record))

    def accept(self, record: Mapping[str, Any]) -> bool:
        """True if the record is new; remembers its key either way."""
        if self.is_duplicate(record):
            self.drop(record)
            return False
        key = self.key_for(record)
        if key is not None:
            self.seen.add(key)
        return True


def dedupe(
    records: Iterable[Mapping[str, Any]],
    existing_keys: Iterable[str],
    key_fn: KeyFunction | None,
) -> list[Mapping[str, Any]]:
    """Order-preserving dedupe; the first occurrence of each key survives."""
    deduplicator = Deduplicator(key_fn, existing_keys)
    return [record for record in records if deduplicator.accept(record)]
