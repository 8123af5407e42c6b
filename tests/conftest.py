"""Pytest configuration and fixtures for FoodMax import tests.

The persistence API is replaced by an in-memory fake served through
``httpx.MockTransport``; the local store lives under ``tmp_path``.
"""

import json
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from foodmax.config import (
    ApiConfig,
    FoodmaxConfig,
    SecretsConfig,
    Settings,
    StorageConfig,
    get_settings,
    reset_settings,
)

API_BASE_URL = "http://api.test"


class FakePersistenceApi:
    """In-memory stand-in for the FoodMax REST API.

    Records are kept per resource path and listed page by page, honouring
    ``page`` and ``limit``. Set ``fail_writes`` to make every POST answer
    503, or ``fail_reads`` for every GET. ``reject`` decides per record
    whether the server refuses it: it returns the refusal reason or None.
    Refused records get a 422 from ``POST /api/<entity>`` and a
    ``Linha N: reason`` message from the ``/import`` endpoint.
    """

    def __init__(self) -> None:
        self.records: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_writes = False
        self.fail_reads = False
        self.reject: Callable[[dict[str, Any]], str | None] | None = None
        self._next_id = 1

    def seed(self, path: str, *records: dict[str, Any]) -> list[dict[str, Any]]:
        stored = []
        for record in records:
            stored.append(self._insert(path, dict(record)))
        return stored

    def _insert(self, path: str, record: dict[str, Any]) -> dict[str, Any]:
        record.setdefault("id", self._next_id)
        if isinstance(record["id"], int):
            self._next_id = max(self._next_id, record["id"]) + 1
        self.records.setdefault(path, []).append(record)
        return record

    def _refusal(self, record: dict[str, Any]) -> str | None:
        return self.reject(record) if self.reject is not None else None

    def posted(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET":
            if self.fail_reads:
                return httpx.Response(503, json={"error": "unavailable"})
            items = self.records.get(path, [])
            term = request.url.params.get("search")
            if term:
                items = [i for i in items if term.lower() in str(i.get("nome", "")).lower()]
            page = int(request.url.params.get("page", 1))
            limit = int(request.url.params.get("limit", len(items) or 1))
            chunk = items[(page - 1) * limit : page * limit]
            return httpx.Response(
                200,
                json={
                    "data": chunk,
                    "pagination": {
                        "page": page,
                        "limit": limit,
                        "total": len(items),
                        "totalPages": max(1, -(-len(items) // limit)),
                    },
                },
            )

        if request.method == "POST":
            if self.fail_writes:
                return httpx.Response(503, json={"error": "unavailable"})
            body = json.loads(request.content or b"{}")
            if path.endswith("/import"):
                resource = path[: -len("/import")]
                imported, errors = 0, []
                for i, record in enumerate(body.get("records", [])):
                    reason = self._refusal(record)
                    if reason:
                        errors.append(f"Linha {i + 1}: {reason}")
                        continue
                    self._insert(resource, dict(record))
                    imported += 1
                return httpx.Response(200, json={"success": True, "imported": imported, "errors": errors})
            reason = self._refusal(body)
            if reason:
                return httpx.Response(422, json={"error": reason})
            created = self._insert(path, dict(body))
            return httpx.Response(201, json={"data": created})

        return httpx.Response(405)


@pytest.fixture
def fake_api() -> FakePersistenceApi:
    """Fresh in-memory persistence API."""
    return FakePersistenceApi()


@pytest_asyncio.fixture
async def api_client(fake_api) -> AsyncGenerator[httpx.AsyncClient, None]:
    """AsyncClient wired to the fake persistence API."""
    async with httpx.AsyncClient(
        base_url=API_BASE_URL,
        transport=httpx.MockTransport(fake_api.handler),
    ) as client:
        yield client


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing at the fake API and a temporary data directory."""
    config = FoodmaxConfig(
        api=ApiConfig(base_url=API_BASE_URL),
        storage=StorageConfig(data_dir=tmp_path / "data"),
    )
    return Settings(config=config, secrets=SecretsConfig(api_token="test-token"))


@pytest.fixture(autouse=True)
def _reset_global_settings():
    """Never let one test's settings leak into another."""
    reset_settings()
    yield
    reset_settings()


def create_test_app():
    """Create a FastAPI app for testing (no lifespan, no real API client)."""
    from fastapi import FastAPI

    from foodmax import __version__
    from foodmax.main import app as main_app

    @asynccontextmanager
    async def test_lifespan(app: FastAPI):
        yield

    test_app = FastAPI(title="FoodMax Test", version=__version__, lifespan=test_lifespan)
    for route in main_app.routes:
        test_app.routes.append(route)
    return test_app


@pytest_asyncio.fixture
async def client(api_client, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the import API, backed by the fake persistence API."""
    app = create_test_app()
    app.state.api_client = api_client
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
