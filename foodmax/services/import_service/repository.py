"""Repositories the committer writes to.

``RemoteRepository`` posts to the persistence API, ``LocalRepository``
keeps rows in a JSON file per entity until they can be reconciled, and
``FallbackRepository`` tries the first and falls back to the second.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from .errors import RepositoryError
from .persistence_api import PersistenceApi
from .schema import EntitySchema

logger = logging.getLogger(__name__)


class CommitTier(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class StoredEntity:
    """A stored record and where it ended up."""

    entity: dict[str, Any]
    tier: CommitTier


class Repository(ABC):
    """Abstract base class for entity repositories."""

    tier: CommitTier

    @abstractmethod
    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        """Store one record.

        Args:
            record: Canonical record to store.

        Returns:
            The stored entity, including its id.

        Raises:
            RepositoryError: If the record could not be stored.
        """

    async def store(self, record: dict[str, Any]) -> StoredEntity:
        return StoredEntity(await self.create(record), self.tier)


class RemoteRepository(Repository):
    """Creates records through the persistence API."""

    tier = CommitTier.REMOTE

    def __init__(self, api: PersistenceApi, schema: EntitySchema):
        self.api = api
        self.schema = schema

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        return await self.api.create(self.schema.path, record)


class LocalRepository(Repository):
    """Durable local store: one JSON array per entity under ``directory``.

    Each entry is ``{"local_id", "saved_at", "record"}``. Writes go to a
    temporary file that replaces the store, so a crash never leaves a
    truncated file behind.
    """

    tier = CommitTier.LOCAL

    def __init__(self, directory: Path, entity: str):
        self.directory = Path(directory)
        self.entity = entity

    @property
    def path(self) -> Path:
        return self.directory / f"{self.entity}.json"

    async def _load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise RepositoryError(f"Cannot read {self.path}: {e}") from e
        if not content.strip():
            return []
        try:
            entries = json.loads(content)
        except json.JSONDecodeError as e:
            raise RepositoryError(f"Local store {self.path} is corrupt: {e}") from e
        return entries if isinstance(entries, list) else []

    async def _save(self, entries: list[dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            await aiofiles.os.makedirs(self.directory, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(entries, ensure_ascii=False, indent=2, default=str))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            raise RepositoryError(f"Cannot write {self.path}: {e}") from e

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        entries = await self._load()
        entry = {
            "local_id": uuid.uuid4().hex,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "record": record,
        }
        entries.append(entry)
        await self._save(entries)
        logger.info("Saved %s record locally (%s)", self.entity, entry["local_id"])
        return {"id": entry["local_id"], **record}

    async def pending(self) -> list[dict[str, Any]]:
        """All entries still waiting for reconciliation, oldest first."""
        return await self._load()

    async def remove(self, local_ids: set[str]) -> int:
        """Drop reconciled entries. Returns how many were removed."""
        if not local_ids:
            return 0
        entries = await self._load()
        kept = [e for e in entries if e.get("local_id") not in local_ids]
        removed = len(entries) - len(kept)
        if removed:
            await self._save(kept)
        return removed


class FallbackRepository(Repository):
    """Try ``primary``; on RepositoryError store through ``fallback``."""

    def __init__(self, primary: Repository, fallback: Repository):
        self.primary = primary
        self.fallback = fallback

    @property
    def tier(self) -> CommitTier:  # type: ignore[override]
        return self.primary.tier

    async def store(self, record: dict[str, Any]) -> StoredEntity:
        try:
            return await self.primary.store(record)
        except RepositoryError as e:
            logger.warning("Primary store failed (%s), falling back to %s", e, self.fallback.tier.value)
        return await self.fallback.store(record)

    async def create(self, record: dict[str, Any]) -> dict[str, Any]:
        return (await self.store(record)).entity
