"""Replay rows saved locally against the persistence API."""

import logging

from foodmax.schemas.import_schemas import ReconcileResponse

from .errors import RepositoryError
from .repository import LocalRepository, Repository

logger = logging.getLogger(__name__)


async def reconcile_pending(local: LocalRepository, remote: Repository) -> ReconcileResponse:
    """Send every locally stored row of an entity to ``remote``.

    Rows the server accepts are removed from the local store; the rest stay
    for the next attempt. Entries are sent oldest first.
    """
    entries = await local.pending()
    done: set[str] = set()
    errors: list[str] = []

    for entry in entries:
        local_id = entry.get("local_id")
        record = entry.get("record")
        if not local_id or not isinstance(record, dict):
            logger.warning("Skipping malformed pending %s entry: %r", local.entity, entry)
            continue
        try:
            await remote.create(record)
        except RepositoryError as e:
            errors.append(f"{local_id}: {e}")
            continue
        done.add(local_id)

    removed = await local.remove(done)
    remaining = len(entries) - removed
    logger.info("Reconciled %d %s records, %d still pending", removed, local.entity, remaining)
    return ReconcileResponse(entity=local.entity, reconciled=removed, remaining=remaining, errors=errors)
