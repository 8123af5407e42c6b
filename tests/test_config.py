"""Tests for the FoodMax configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from foodmax.config.loader import (
    apply_env_overrides,
    find_config_file,
    get_config_search_paths,
    get_secrets_search_paths,
    load_config,
    load_secrets,
    load_toml_file,
    parse_env_file,
)
from foodmax.config.schema import (
    ApiConfig,
    FoodmaxConfig,
    ImportConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from foodmax.config.settings import Settings, get_settings, reset_settings


class TestSchemaDefaults:
    """Test default values in schema models."""

    def test_server_config_defaults(self):
        """Test ServerConfig has correct defaults."""
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.cors_origins == []

    def test_api_config_defaults(self):
        """Test ApiConfig has correct defaults."""
        config = ApiConfig()
        assert config.base_url == "http://localhost:8080"
        assert config.timeout_seconds == 30.0
        assert config.enabled is True

    def test_storage_config_defaults(self):
        """Test StorageConfig has correct defaults."""
        config = StorageConfig()
        assert config.data_dir == Path("data")
        assert config.pending_dir == Path("data/pending")

    def test_import_config_defaults(self):
        """Test ImportConfig has correct defaults."""
        config = ImportConfig()
        assert config.max_rows == 1000
        assert config.default_ddi == "+55"
        assert config.fallback_strategy == "first_active"
        assert config.candidate_page_size == 200

    def test_import_config_rejects_unknown_strategy(self):
        """Test only known fallback strategies are accepted."""
        with pytest.raises(ValidationError):
            ImportConfig(fallback_strategy="random")

    def test_foodmax_config_defaults(self):
        """Test FoodmaxConfig has correct defaults."""
        config = FoodmaxConfig()
        assert config.app_name == "FoodMax Import"
        assert isinstance(config.server, ServerConfig)
        assert isinstance(config.api, ApiConfig)
        assert isinstance(config.importing, ImportConfig)

    def test_secrets_config_defaults(self):
        """Test SecretsConfig has correct defaults."""
        assert SecretsConfig().api_token is None


class TestConfigSearchPaths:
    """Test configuration file search paths."""

    def test_config_search_paths_order(self):
        """Test config search paths are in correct priority order."""
        paths = get_config_search_paths()
        assert len(paths) == 4
        assert paths[0] == Path.cwd() / "config.toml"
        assert paths[1] == Path.home() / ".config" / "foodmax" / "config.toml"
        assert paths[2] == Path("/opt/foodmax/config.toml")
        assert paths[3] == Path("/etc/foodmax/config.toml")

    def test_secrets_search_paths_order(self):
        """Test secrets search paths are in correct priority order."""
        paths = get_secrets_search_paths()
        assert paths[0] == Path.cwd() / "secrets.env"
        assert paths[-1] == Path("/etc/foodmax/secrets.env")


class TestTomlLoading:
    """Test TOML file loading."""

    def test_load_toml_file(self, tmp_path):
        """Test loading a valid TOML file."""
        toml_content = """
app_name = "TestApp"

[api]
base_url = "http://foodmax.internal:8080"
timeout_seconds = 5.5

[importing]
max_rows = 250
"""
        config_file = tmp_path / "config.toml"
        config_file.write_text(toml_content)

        data = load_toml_file(config_file)
        assert data["app_name"] == "TestApp"
        assert data["api"]["base_url"] == "http://foodmax.internal:8080"
        assert data["api"]["timeout_seconds"] == 5.5
        assert data["importing"]["max_rows"] == 250

    def test_load_config_from_file(self, tmp_path):
        """Test load_config with a specific file."""
        toml_content = """
[importing]
fallback_strategy = "none"
default_ddi = "+351"

[storage]
data_dir = "/var/lib/foodmax"
"""
        config_file = tmp_path / "config.toml"
        config_file.write_text(toml_content)

        config = load_config(config_file)
        assert config.importing.fallback_strategy == "none"
        assert config.importing.default_ddi == "+351"
        assert config.storage.pending_dir == Path("/var/lib/foodmax/pending")
        # Defaults should still apply
        assert config.importing.max_rows == 1000
        assert config.server.host == "127.0.0.1"


class TestEnvFileParsing:
    """Test .env file parsing."""

    def test_parse_env_file_with_quotes(self, tmp_path):
        """Test parsing .env file with quoted values."""
        env_content = '''
KEY1="double quoted value"
KEY2='single quoted value'
KEY3=unquoted value
'''
        env_file = tmp_path / "test.env"
        env_file.write_text(env_content)

        result = parse_env_file(env_file)
        assert result["KEY1"] == "double quoted value"
        assert result["KEY2"] == "single quoted value"
        assert result["KEY3"] == "unquoted value"

    def test_parse_env_file_skips_comments_and_blanks(self, tmp_path):
        """Test that comments and empty lines are skipped."""
        env_content = """
# This is a comment
KEY1=value1

KEY2=value2
"""
        env_file = tmp_path / "test.env"
        env_file.write_text(env_content)

        result = parse_env_file(env_file)
        assert result == {"KEY1": "value1", "KEY2": "value2"}


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_apply_api_overrides(self):
        """Test persistence API overrides are typed."""
        config_dict = {}

        with patch.dict(
            os.environ,
            {"FOODMAX_API_BASE_URL": "http://api:9000", "FOODMAX_API_TIMEOUT_SECONDS": "2.5"},
        ):
            apply_env_overrides(config_dict)

        assert config_dict["api"]["base_url"] == "http://api:9000"
        assert config_dict["api"]["timeout_seconds"] == 2.5

    def test_apply_import_overrides(self):
        """Test import overrides land in the importing section."""
        config_dict = {}

        with patch.dict(
            os.environ,
            {"FOODMAX_IMPORT_MAX_ROWS": "50", "FOODMAX_IMPORT_FALLBACK_STRATEGY": "none"},
        ):
            apply_env_overrides(config_dict)

        assert config_dict["importing"]["max_rows"] == 50
        assert config_dict["importing"]["fallback_strategy"] == "none"

    def test_apply_boolean_override_false(self):
        """Test boolean overrides with 'false' value."""
        config_dict = {"api": {"enabled": True}}

        with patch.dict(os.environ, {"FOODMAX_API_ENABLED": "false"}):
            apply_env_overrides(config_dict)

        assert config_dict["api"]["enabled"] is False

    def test_data_dir_shorthand(self):
        """Test FOODMAX_DATA_DIR is accepted as shorthand."""
        config_dict = {}

        with patch.dict(os.environ, {"FOODMAX_DATA_DIR": "/srv/foodmax"}):
            apply_env_overrides(config_dict)

        assert config_dict["storage"]["data_dir"] == "/srv/foodmax"


class TestSecretsLoading:
    """Test secrets loading."""

    def test_load_secrets_from_file(self, tmp_path):
        """Test loading secrets from a file."""
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("FOODMAX_API_TOKEN=file-token\n")

        with patch.dict(os.environ, {}, clear=True):
            secrets = load_secrets(secrets_file)
        assert secrets.api_token == "file-token"

    def test_load_secrets_env_override(self, tmp_path):
        """Test environment variables override file secrets."""
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("FOODMAX_API_TOKEN=file-token\n")

        with patch.dict(os.environ, {"FOODMAX_API_TOKEN": "env-token"}):
            secrets = load_secrets(secrets_file)

        assert secrets.api_token == "env-token"


class TestSettings:
    """Test the Settings class."""

    def test_settings_property_accessors(self, tmp_path):
        """Test all property accessors work correctly."""
        config = FoodmaxConfig(
            app_name="TestApp",
            server=ServerConfig(host="0.0.0.0", port=9000),
            api=ApiConfig(base_url="http://api.test", enabled=False),
            storage=StorageConfig(data_dir=tmp_path),
            importing=ImportConfig(max_rows=10, fallback_strategy="none"),
        )
        settings = Settings(config=config, secrets=SecretsConfig(api_token="tok"))

        assert settings.app_name == "TestApp"
        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.api_base_url == "http://api.test"
        assert settings.api_enabled is False
        assert settings.api_token == "tok"
        assert settings.pending_dir == tmp_path / "pending"
        assert settings.max_rows == 10
        assert settings.fallback_strategy == "none"
        assert settings.log_level == "INFO"

    def test_missing_token_logs_warning(self, caplog):
        """Test an enabled API without a token is flagged."""
        with caplog.at_level("WARNING"):
            Settings(config=FoodmaxConfig(), secrets=SecretsConfig())
        assert "No API token configured" in caplog.text

    def test_get_settings_singleton(self, tmp_path, monkeypatch):
        """Test get_settings returns same instance."""
        monkeypatch.chdir(tmp_path)
        reset_settings()
        s1 = get_settings()
        s2 = get_settings()
        assert s1 is s2

    def test_reset_settings_clears_cache(self, tmp_path, monkeypatch):
        """Test reset_settings clears the cached instance."""
        monkeypatch.chdir(tmp_path)
        reset_settings()
        s1 = get_settings()
        reset_settings()
        s2 = get_settings()
        assert s1 is not s2


class TestFindConfigFile:
    """Test find_config_file function."""

    def test_find_config_file_in_cwd(self, tmp_path, monkeypatch):
        """Test a config.toml in the working directory is found first."""
        (tmp_path / "config.toml").write_text('app_name = "Local"\n')
        monkeypatch.chdir(tmp_path)
        assert find_config_file() == tmp_path / "config.toml"
