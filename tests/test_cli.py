"""Tests for the import CLI."""

import importlib
import json
from unittest.mock import patch

import pytest

from foodmax.cli import import_cli
from foodmax.services.import_service import LocalRepository


@pytest.fixture
def cli_settings(test_settings, monkeypatch):
    """Make the CLI's global settings the test settings."""
    settings_module = importlib.import_module("foodmax.config.settings")
    monkeypatch.setattr(settings_module, "_settings", test_settings)
    return test_settings


class TestLoadRows:
    """Tests for reading row files."""

    def test_load_list(self, tmp_path):
        """Test a bare list of rows."""
        path = tmp_path / "rows.json"
        path.write_text(json.dumps([{"Nome": "Sul"}, "junk", {"Nome": "Norte"}]))
        assert import_cli.load_rows(path) == [{"Nome": "Sul"}, {"Nome": "Norte"}]

    def test_load_wrapped(self, tmp_path):
        """Test rows wrapped in an object."""
        path = tmp_path / "rows.json"
        path.write_text(json.dumps({"rows": [{"Nome": "Sul"}]}))
        assert import_cli.load_rows(path) == [{"Nome": "Sul"}]

    def test_load_rejects_scalar(self, tmp_path):
        """Test a file without rows is an error."""
        path = tmp_path / "rows.json"
        path.write_text("42")
        with pytest.raises(ValueError):
            import_cli.load_rows(path)


class TestImportCommands:
    """Tests for the async command functions."""

    @pytest.mark.asyncio
    async def test_run_import(self, cli_settings, api_client, fake_api, tmp_path, capsys):
        """Test importing a file through the API."""
        path = tmp_path / "fornecedores.json"
        path.write_text(json.dumps([{"Nome": "Sul"}, {"Nome": ""}]))

        with patch.object(import_cli, "_api_client", return_value=api_client):
            code = await import_cli.run_import("fornecedores", path)

        out = capsys.readouterr().out
        assert code == 0
        assert "1 record imported to the server" in out
        assert "ERROR   Row 2: Nome is required" in out
        assert len(fake_api.records["/api/fornecedores"]) == 1

    @pytest.mark.asyncio
    async def test_list_pending(self, cli_settings, capsys):
        """Test pending rows are listed by name."""
        await LocalRepository(cli_settings.pending_dir, "clientes").create({"nome": "Ana"})

        code = await import_cli.list_pending("clientes")

        assert code == 0
        assert "Ana" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_list_pending_empty(self, cli_settings, capsys):
        """Test the empty message."""
        await import_cli.list_pending("itens")
        assert "No pending itens records." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_reconcile(self, cli_settings, api_client, fake_api, capsys):
        """Test pending rows are sent and removed."""
        local = LocalRepository(cli_settings.pending_dir, "fornecedores")
        await local.create({"nome": "Sul"})

        with patch.object(import_cli, "_api_client", return_value=api_client):
            code = await import_cli.reconcile("fornecedores")

        assert code == 0
        assert "Reconciled 1 fornecedores records, 0 still pending." in capsys.readouterr().out
        assert await local.pending() == []


class TestMain:
    """Tests for argument handling."""

    def test_no_command_prints_help(self, capsys):
        """Test running without a command fails with usage."""
        assert import_cli.main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_entities(self, capsys):
        """Test the entities listing."""
        assert import_cli.main(["entities"]) == 0
        out = capsys.readouterr().out
        assert "clientes (batch import)" in out
        assert "required: " in out

    def test_unknown_entity_exit_code(self, cli_settings, capsys):
        """Test unknown entities exit with 2."""
        assert import_cli.main(["pending", "vinhos"]) == 2
        assert "Known entities" in capsys.readouterr().out

    def test_missing_file_exit_code(self, cli_settings, tmp_path, capsys):
        """Test a missing input file exits with 1."""
        assert import_cli.main(["run", "fornecedores", str(tmp_path / "missing.json")]) == 1
        assert "Error:" in capsys.readouterr().out
