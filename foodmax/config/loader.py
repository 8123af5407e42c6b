"""Reading config.toml and secrets.env for FoodMax.

Both files are looked up in the same set of directories. ``FOODMAX_*``
environment variables win over anything read from disk.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from foodmax.config.schema import FoodmaxConfig, SecretsConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "FOODMAX"

# FOODMAX_<suffix> -> (section, key)
ENV_MAPPINGS: dict[str, tuple[str, str]] = {
    "SERVER_HOST": ("server", "host"),
    "SERVER_PORT": ("server", "port"),
    "SERVER_DEBUG": ("server", "debug"),
    "DEBUG": ("server", "debug"),
    "API_BASE_URL": ("api", "base_url"),
    "API_TIMEOUT_SECONDS": ("api", "timeout_seconds"),
    "API_ENABLED": ("api", "enabled"),
    "STORAGE_DATA_DIR": ("storage", "data_dir"),
    "DATA_DIR": ("storage", "data_dir"),
    "IMPORT_MAX_ROWS": ("importing", "max_rows"),
    "IMPORT_DEFAULT_DDI": ("importing", "default_ddi"),
    "IMPORT_FALLBACK_STRATEGY": ("importing", "fallback_strategy"),
    "IMPORT_CANDIDATE_PAGE_SIZE": ("importing", "candidate_page_size"),
    "LOG_LEVEL": ("logging", "level"),
}

# secrets.env / environment name -> SecretsConfig field
SECRET_KEYS: dict[str, str] = {
    "FOODMAX_API_TOKEN": "api_token",
}

_INT_KEYS = {"port", "max_rows", "candidate_page_size"}
_FLOAT_KEYS = {"timeout_seconds"}
_BOOL_KEYS = {"debug", "enabled"}


def _search_dirs() -> list[Path]:
    return [
        Path.cwd(),
        Path.home() / ".config" / "foodmax",
        Path("/opt/foodmax"),
        Path("/etc/foodmax"),
    ]


def get_config_search_paths() -> list[Path]:
    """Candidate config.toml locations, highest priority first."""
    return [directory / "config.toml" for directory in _search_dirs()]


def get_secrets_search_paths() -> list[Path]:
    """Candidate secrets.env locations, highest priority first."""
    return [directory / "secrets.env" for directory in _search_dirs()]


def _first_existing(paths: list[Path]) -> Path | None:
    found = next((path for path in paths if path.is_file()), None)
    if found is not None:
        logger.debug("Using %s", found)
    return found


def find_config_file() -> Path | None:
    return _first_existing(get_config_search_paths())


def find_secrets_file() -> Path | None:
    return _first_existing(get_secrets_search_paths())


def load_toml_file(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=value`` lines. Blank lines and ``#`` comments are skipped
    and one level of matching quotes is stripped from values."""
    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        values[key.strip()] = _unquote(value.strip())
    return values


def _coerce(key: str, value: str) -> Any:
    if key in _INT_KEYS:
        return int(value)
    if key in _FLOAT_KEYS:
        return float(value)
    if key in _BOOL_KEYS:
        return value.lower() in ("true", "1", "yes")
    return value


def apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> None:
    """Overlay ``<prefix>_*`` environment variables onto ``config_dict`` in place.

    ``FOODMAX_IMPORT_MAX_ROWS=50`` sets ``config_dict["importing"]["max_rows"] = 50``;
    see ENV_MAPPINGS for the full list.
    """
    for suffix, (section, key) in ENV_MAPPINGS.items():
        value = os.environ.get(f"{prefix}_{suffix}")
        if value is not None:
            config_dict.setdefault(section, {})[key] = _coerce(key, value)


def load_secrets(secrets_file: Path | None = None) -> SecretsConfig:
    """Build SecretsConfig from secrets.env, then the environment."""
    path = secrets_file if secrets_file is not None else find_secrets_file()
    from_file = parse_env_file(path) if path is not None and path.exists() else {}
    if from_file:
        logger.info("Loading secrets from: %s", path)

    values: dict[str, str] = {}
    for name, field in SECRET_KEYS.items():
        value = os.environ.get(name) or from_file.get(name)
        if value:
            values[field] = value
    return SecretsConfig(**values)


def load_config(config_file: Path | None = None) -> FoodmaxConfig:
    """Build FoodmaxConfig from config.toml (when one is found) plus env overrides.

    Args:
        config_file: Explicit file to read instead of searching.
    """
    path = config_file if config_file is not None else find_config_file()
    config_dict: dict[str, Any] = {}
    if path is not None and path.exists():
        logger.info("Loading config from: %s", path)
        config_dict = load_toml_file(path)
    else:
        logger.info("No config.toml found, using defaults")

    apply_env_overrides(config_dict)
    return FoodmaxConfig(**config_dict)
