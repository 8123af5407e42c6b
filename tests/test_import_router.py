"""Tests for the import API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from foodmax.config import get_settings


# =============================================================================
# Entities and mapping preview
# =============================================================================


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test the health endpoint reports the API status."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "api_enabled" in data


@pytest.mark.asyncio
async def test_list_entities(client: AsyncClient) -> None:
    """Test every importable entity is listed with its columns."""
    response = await client.get("/api/import/entities")
    assert response.status_code == 200
    entities = {e["name"]: e for e in response.json()}
    assert set(entities) == {
        "estabelecimentos",
        "clientes",
        "fornecedores",
        "itens-categorias",
        "itens",
        "financeiro",
        "entregas",
        "comunicacoes",
        "cardapios",
        "pedidos",
    }
    assert "telefone" in entities["clientes"]["required"]
    assert entities["clientes"]["supports_batch_import"] is True
    assert entities["fornecedores"]["supports_batch_import"] is False


@pytest.mark.asyncio
async def test_mapping_preview(client: AsyncClient) -> None:
    """Test headers are mapped and gaps reported."""
    response = await client.post(
        "/api/import/clientes/mapping",
        json={"headers": ["Nome", "E-mail", "Celular", "Observações"]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["mapping"]["E-mail"] == "email"
    assert data["mapping"]["Celular"] == "telefone"
    assert "Observações" in data["unmapped"]
    assert "estabelecimento_id" in data["missing_required"]


@pytest.mark.asyncio
async def test_unknown_entity_is_404(client: AsyncClient) -> None:
    """Test unknown entities are rejected."""
    response = await client.post("/api/import/vinhos", json={"rows": [{"Nome": "x"}]})
    assert response.status_code == 404


# =============================================================================
# Import
# =============================================================================


@pytest.mark.asyncio
async def test_import_rows(client: AsyncClient, fake_api) -> None:
    """Test rows are imported through the persistence API."""
    response = await client.post(
        "/api/import/fornecedores",
        json={"rows": [{"Fornecedor": "Sul"}, {"Fornecedor": ""}, {"Fornecedor": "Norte"}]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["imported"] == 2
    assert data["errors"] == ["Row 2: Nome is required"]
    assert len(fake_api.records["/api/fornecedores"]) == 2


@pytest.mark.asyncio
async def test_import_empty_batch_is_400(client: AsyncClient) -> None:
    """Test an empty batch is a bad request."""
    response = await client.post("/api/import/fornecedores", json={"rows": []})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_import_too_many_rows_is_400(client: AsyncClient) -> None:
    """Test the row limit is enforced."""
    rows = [{"Nome": f"Fornecedor {i}"} for i in range(1001)]
    response = await client.post("/api/import/fornecedores", json={"rows": rows})
    assert response.status_code == 400
    assert "1000" in response.json()["detail"]


@pytest.mark.asyncio
async def test_import_bulk_query_param(client: AsyncClient, fake_api) -> None:
    """Test ?bulk=true goes through the batch endpoint."""
    response = await client.post(
        "/api/import/estabelecimentos?bulk=true",
        json={"rows": [{"Nome": "A"}, {"Nome": "B"}]},
    )
    assert response.status_code == 200
    assert response.json()["imported"] == 2
    assert len(fake_api.posted("/api/estabelecimentos/import")) == 1


# =============================================================================
# Pending rows and reconciliation
# =============================================================================


@pytest.mark.asyncio
async def test_pending_then_reconcile(client: AsyncClient, fake_api) -> None:
    """Test rows saved while the server is down are replayed later."""
    fake_api.fail_writes = True
    response = await client.post("/api/import/fornecedores", json={"rows": [{"Nome": "Sul"}]})
    assert response.json()["local"] == 1

    response = await client.get("/api/import/fornecedores/pending")
    assert response.status_code == 200
    assert response.json()["count"] == 1

    fake_api.fail_writes = False
    response = await client.post("/api/import/fornecedores/reconcile")
    assert response.status_code == 200
    data = response.json()
    assert data["reconciled"] == 1
    assert data["remaining"] == 0

    response = await client.get("/api/import/fornecedores/pending")
    assert response.json()["count"] == 0


@pytest.mark.asyncio
async def test_reconcile_without_api_is_503(test_settings) -> None:
    """Test reconciliation needs the persistence API."""
    from tests.conftest import create_test_app

    app = create_test_app()
    app.state.api_client = None
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.post("/api/import/fornecedores/reconcile")
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_import_survives_unparseable_cells(client: AsyncClient, fake_api) -> None:
    """Test out-of-range cells fail their row instead of the whole request."""
    fake_api.seed("/api/estabelecimentos", {"id": 1, "nome": "Sede"})
    response = await client.post(
        "/api/import/financeiro",
        json={
            "rows": [
                {"Tipo": "Receita", "Categoria": "Vendas", "Valor": "1E+300000000", "Data": "05/03/2024"},
                {"Tipo": "Receita", "Categoria": "Vendas", "Valor": "10,00", "Data": "0001-01-01T00:00:00+00:00"},
                {"Tipo": "Receita", "Categoria": "Vendas", "Valor": "10,00", "Data": "05/03/2024"},
            ]
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["imported"] == 1
    assert data["errors"] == ["Row 1: Valor is required", "Row 2: Data da Transação is required"]
