"""Process-wide FoodMax settings.

``Settings`` flattens FoodmaxConfig and SecretsConfig into plain
attributes. ``get_settings()`` builds it on first use; ``settings`` is a
module-level stand-in that forwards to it, so importing this module never
touches the filesystem.
"""

import logging
from pathlib import Path

from foodmax.config.loader import load_config, load_secrets
from foodmax.config.schema import FoodmaxConfig, SecretsConfig

logger = logging.getLogger(__name__)


class Settings:
    """Read-only view over the loaded configuration and secrets.

    Args:
        config: Configuration to use; loaded from config.toml when omitted.
        secrets: Secrets to use; loaded from secrets.env when omitted.
    """

    def __init__(
        self,
        config: FoodmaxConfig | None = None,
        secrets: SecretsConfig | None = None,
    ):
        self._config = config if config is not None else load_config()
        self._secrets = secrets if secrets is not None else load_secrets()

        if self._config.api.enabled and not self._secrets.api_token:
            logger.warning(
                "No API token configured. Requests to %s will be sent "
                "unauthenticated. Set FOODMAX_API_TOKEN in secrets.env.",
                self._config.api.base_url,
            )

    @property
    def config(self) -> FoodmaxConfig:
        return self._config

    @property
    def secrets(self) -> SecretsConfig:
        return self._secrets

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    @property
    def debug(self) -> bool:
        return self._config.server.debug

    # Server
    @property
    def host(self) -> str:
        return self._config.server.host

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Persistence API
    @property
    def api_base_url(self) -> str:
        return self._config.api.base_url

    @property
    def api_timeout_seconds(self) -> float:
        return self._config.api.timeout_seconds

    @property
    def api_enabled(self) -> bool:
        return self._config.api.enabled

    # Storage
    @property
    def data_dir(self) -> Path:
        return self._config.storage.data_dir

    @property
    def pending_dir(self) -> Path:
        return self._config.storage.pending_dir

    # Import
    @property
    def max_rows(self) -> int:
        return self._config.importing.max_rows

    @property
    def default_ddi(self) -> str:
        return self._config.importing.default_ddi

    @property
    def fallback_strategy(self) -> str:
        return self._config.importing.fallback_strategy

    @property
    def candidate_page_size(self) -> int:
        return self._config.importing.candidate_page_size

    # Logging
    @property
    def log_level(self) -> str:
        return self._config.logging.level

    @property
    def log_format(self) -> str:
        return self._config.logging.format

    # Secrets
    @property
    def api_token(self) -> str | None:
        return self._secrets.api_token


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the shared Settings, loading them on the first call."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the shared Settings so the next access reloads them."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Forwards attribute access to ``get_settings()``."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return f"<settings proxy for {get_settings()!r}>"


settings = _SettingsProxy()
