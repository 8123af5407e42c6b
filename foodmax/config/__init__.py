"""FoodMax configuration.

Values come from config.toml (first of ./, ~/.config/foodmax/, /opt/foodmax/,
/etc/foodmax/), then ``FOODMAX_*`` environment variables. The API token lives
in a secrets.env file found in the same directories, or in the environment.
"""

from foodmax.config.schema import (
    ApiConfig,
    FoodmaxConfig,
    ImportConfig,
    LoggingConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from foodmax.config.settings import Settings, get_settings, reset_settings, settings

__all__ = [
    "ApiConfig",
    "FoodmaxConfig",
    "ImportConfig",
    "LoggingConfig",
    "SecretsConfig",
    "ServerConfig",
    "Settings",
    "StorageConfig",
    "get_settings",
    "reset_settings",
    "settings",
]
