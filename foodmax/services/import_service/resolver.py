"""Foreign-key resolution: human-readable references -> internal ids.

Spreadsheets name related records ("Restaurante do Zé") rather than
carrying their ids. Resolution walks a fixed sequence of tiers and stops
at the first hit:

1. a purely numeric reference is taken as the id itself;
2. exact name match among the known candidates (case-insensitive);
3. substring match in either direction;
4. exact match among the results of a remote search;
5. creation of the missing record, when the caller allows it;
6. the fallback strategy (``first_active`` or ``none``).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from foodmax.schemas.import_schemas import EntityReference

logger = logging.getLogger(__name__)

RemoteSearch = Callable[[str], Awaitable[list[EntityReference]]]
CreateReference = Callable[[str], Awaitable[EntityReference | None]]


class FallbackStrategy(str, Enum):
    FIRST_ACTIVE = "first_active"
    NONE = "none"


class ResolutionTier(str, Enum):
    NUMERIC = "numeric"
    EXACT = "exact"
    SUBSTRING = "substring"
    REMOTE = "remote"
    CREATED = "created"
    FALLBACK = "fallback"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    """Which id a reference resolved to, and through which tier."""

    id: int | None
    tier: ResolutionTier
    reference: str
    created: EntityReference | None = None

    @property
    def resolved(self) -> bool:
        return self.id is not None


def _key(value: Any) -> str:
    return str(value or "").strip().lower()


def _numeric_id(reference: Any) -> int | None:
    if isinstance(reference, bool):
        return None
    if isinstance(reference, int):
        return reference
    text = str(reference).strip()
    if text.isdigit():
        return int(text)
    return None


def pick_fallback(candidates: Sequence[EntityReference]) -> EntityReference | None:
    """First active candidate, else the first candidate, else None."""
    for candidate in candidates:
        if candidate.active:
            return candidate
    return candidates[0] if candidates else None


class ForeignKeyResolver:
    """Resolve references against a candidate list with tiered fallback.

    Args:
        fallback: Default strategy when no tier matches. Can be overridden
            per call (foreign-key specs carry their own override).
    """

    def __init__(self, fallback: FallbackStrategy | str = FallbackStrategy.FIRST_ACTIVE):
        self.fallback = FallbackStrategy(fallback)

    async def resolve(
        self,
        reference: Any,
        candidates: Sequence[EntityReference],
        remote_search: RemoteSearch | None = None,
    ) -> int | None:
        resolution = await self.resolve_detailed(reference, candidates, remote_search)
        return resolution.id

    async def resolve_detailed(
        self,
        reference: Any,
        candidates: Sequence[EntityReference],
        remote_search: RemoteSearch | None = None,
        create: CreateReference | None = None,
        fallback: FallbackStrategy | str | None = None,
    ) -> Resolution:
        strategy = FallbackStrategy(fallback) if fallback else self.fallback
        term = str(reference).strip() if reference is not None else ""

        if term:
            numeric = _numeric_id(reference)
            if numeric is not None:
                logger.debug("Reference '%s' is a numeric id", term)
                return Resolution(numeric, ResolutionTier.NUMERIC, term)

            wanted = term.lower()
            for candidate in candidates:
                if _key(candidate.display_name) == wanted:
                    logger.debug("Exact match for '%s': %s (id %s)", term, candidate.display_name, candidate.id)
                    return Resolution(candidate.id, ResolutionTier.EXACT, term)

            for candidate in candidates:
                name = _key(candidate.display_name)
                if name and (wanted in name or name in wanted):
                    logger.info(
                        "Partial match for '%s': %s (id %s)", term, candidate.display_name, candidate.id
                    )
                    return Resolution(candidate.id, ResolutionTier.SUBSTRING, term)

            if remote_search is not None:
                found = await self._search_remote(term, remote_search)
                if found is not None:
                    logger.info("Found '%s' via remote search (id %s)", term, found.id)
                    return Resolution(found.id, ResolutionTier.REMOTE, term)

            if create is not None:
                created = await create(term)
                if created is not None:
                    logger.info("Created missing reference '%s' (id %s)", term, created.id)
                    return Resolution(created.id, ResolutionTier.CREATED, term, created=created)

        if strategy is FallbackStrategy.FIRST_ACTIVE:
            chosen = pick_fallback(candidates)
            if chosen is not None:
                logger.warning(
                    "Reference '%s' not found, falling back to %s (id %s)",
                    term,
                    chosen.display_name,
                    chosen.id,
                )
                return Resolution(chosen.id, ResolutionTier.FALLBACK, term)

        logger.warning("Reference '%s' could not be resolved", term)
        return Resolution(None, ResolutionTier.UNRESOLVED, term)

    async def _search_remote(self, term: str, remote_search: RemoteSearch) -> EntityReference | None:
        wanted = term.lower()
        try:
            results = await remote_search(term)
        except Exception as e:
            logger.error("Remote search for '%s' failed: %s", term, e)
            return None
        for candidate in results:
            if _key(candidate.display_name) == wanted:
                return candidate
        return None
