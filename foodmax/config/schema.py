"""Pydantic models for FoodMax configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class ApiConfig(BaseModel):
    """Persistence API the import pipeline writes to."""

    base_url: str = "http://localhost:8080"
    timeout_seconds: float = 30.0
    enabled: bool = True


class StorageConfig(BaseModel):
    """Local durable storage configuration."""

    data_dir: Path = Field(default_factory=lambda: Path("data"))

    @property
    def pending_dir(self) -> Path:
        """Directory holding rows saved locally while the API was unreachable."""
        return self.data_dir / "pending"


class ImportConfig(BaseModel):
    """Import pipeline behaviour."""

    max_rows: int = 1000
    default_ddi: str = "+55"
    fallback_strategy: Literal["first_active", "none"] = "first_active"
    candidate_page_size: int = 200


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class FoodmaxConfig(BaseModel):
    """Main FoodMax configuration loaded from config.toml."""

    app_name: str = "FoodMax Import"
    server: ServerConfig = Field(default_factory=ServerConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    importing: ImportConfig = Field(default_factory=ImportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env file.

    These are sensitive values that should not be stored in config.toml.
    """

    api_token: str | None = None
