"""HTTP gateway to the FoodMax persistence API."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from foodmax.schemas.import_schemas import EntityReference

from .errors import RepositoryError

logger = logging.getLogger(__name__)

# Upper bound on pages fetched by a single listing
MAX_PAGES = 500


def create_api_client(
    base_url: str,
    token: str | None = None,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the shared AsyncClient for the persistence API.

    Args:
        base_url: Root URL of the API, e.g. ``http://localhost:8080``.
        token: Bearer token sent with every request, if any.
        timeout: Per-request timeout in seconds.
        transport: Optional transport override (used by tests).
    """
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers,
        timeout=timeout,
        transport=transport,
    )


def unwrap(body: Any) -> Any:
    """Responses are either the payload itself or ``{"data": payload}``."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class PersistenceApi:
    """Thin async wrapper over the REST endpoints the importer needs.

    Every failure (transport error or non-2xx status) is raised as
    RepositoryError so callers can fall back to local storage.
    """

    def __init__(self, client: httpx.AsyncClient, page_size: int = 200):
        self.client = client
        self.page_size = page_size

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RepositoryError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            detail = response.text[:200]
            raise RepositoryError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RepositoryError(f"{method} {path} returned invalid JSON", response.status_code) from e

    async def create(self, path: str, record: dict[str, Any]) -> dict[str, Any]:
        """POST one record and return the created entity (must carry an id)."""
        created = unwrap(await self._request("POST", path, json=record))
        if not isinstance(created, dict) or created.get("id") is None:
            raise RepositoryError(f"POST {path} did not return a created record")
        return created

    async def import_many(self, path: str, records: list[dict[str, Any]]) -> dict[str, Any]:
        """POST a whole batch to ``<path>/import``."""
        body = await self._request("POST", f"{path}/import", json={"records": records})
        if not isinstance(body, dict):
            raise RepositoryError(f"POST {path}/import returned an unexpected body")
        return body

    async def list_records(self, path: str, search: str | None = None) -> list[dict[str, Any]]:
        """Every record under ``path``, following pages until a short one.

        Stops early when the body's ``pagination.totalPages`` says so, or
        when a page brings nothing new (servers that ignore ``page``).
        """
        records: list[dict[str, Any]] = []
        seen_ids: set[str] = set()
        for page in range(1, MAX_PAGES + 1):
            params: dict[str, Any] = {"page": page, "limit": self.page_size}
            if search:
                params["search"] = search
            body = await self._request("GET", path, params=params)
            items = unwrap(body)
            if not isinstance(items, list):
                raise RepositoryError(f"GET {path} did not return a list")

            fresh = [
                item
                for item in items
                if isinstance(item, dict) and (item.get("id") is None or str(item["id"]) not in seen_ids)
            ]
            records.extend(fresh)
            seen_ids.update(str(item["id"]) for item in fresh if item.get("id") is not None)

            total_pages = _total_pages(body)
            if len(items) < self.page_size or not fresh:
                break
            if total_pages is not None and page >= total_pages:
                break
        else:
            logger.warning("Stopped listing %s after %d pages", path, MAX_PAGES)
        logger.debug("Listed %d records from %s", len(records), path)
        return records

    async def list_references(self, path: str, display_field: str = "nome") -> list[EntityReference]:
        return to_references(await self.list_records(path), display_field)

    async def search_references(
        self,
        path: str,
        term: str,
        display_field: str = "nome",
    ) -> list[EntityReference]:
        return to_references(await self.list_records(path, search=term), display_field)


def to_references(items: list[dict[str, Any]], display_field: str = "nome") -> list[EntityReference]:
    """Convert API records to EntityReference.

    Records without an id, or whose id is not an integer, are skipped.
    """
    references: list[EntityReference] = []
    for item in items:
        if item.get("id") is None:
            continue
        try:
            reference = EntityReference(
                id=item["id"],
                display_name=str(item.get(display_field) or ""),
                active=item.get("ativo", True) is not False,
            )
        except ValidationError:
            logger.warning("Skipping record with unusable id %r", item["id"])
            continue
        references.append(reference)
    return references


def _total_pages(body: Any) -> int | None:
    if not isinstance(body, dict):
        return None
    pagination = body.get("pagination")
    if not isinstance(pagination, dict):
        return None
    try:
        return int(pagination["totalPages"])
    except (KeyError, TypeError, ValueError):
        return None
