"""
Configuration.

Two sources, never mixed:

    config/.env or the environment   secrets only: JWT_SECRET and an
                                     optional DATABASE_URL override
    config/settings/*.yaml           everything else, validated against
                                     the schemas in config_schema.py

Both are located through the .project_root marker, searched upwards from
the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from eisenhower.backend.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    FeaturesSchema,
    LoggingSchema,
    SecuritySchema,
)

PROJECT_MARKER = ".project_root"


def find_project_root() -> Path:
    """Walk up from the working directory to the directory holding .project_root."""
    current = Path.cwd()
    while current != current.parent:
        if (current / PROJECT_MARKER).exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """find_project_root() for entry scripts: exits instead of raising."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """
    Read one file from config/settings/.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = find_project_root() / "config" / "settings" / filename
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets. Nothing here is ever printed or logged."""

    jwt_secret: str
    database_url: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type[BaseModel], filename: str) -> Any:
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    Validated YAML settings, one attribute per file.

    All files are read and checked in the constructor, so a bad file fails
    at startup rather than on first use.
    """

    SECTIONS: dict[str, tuple[type[BaseModel], str]] = {
        "application": (ApplicationSchema, "application.yaml"),
        "database": (DatabaseSchema, "database.yaml"),
        "logging": (LoggingSchema, "logging.yaml"),
        "features": (FeaturesSchema, "features.yaml"),
        "security": (SecuritySchema, "security.yaml"),
    }

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema

    def __init__(self) -> None:
        for name, (schema_cls, filename) in self.SECTIONS.items():
            setattr(self, name, _load_validated(schema_cls, filename))


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url() -> str:
    """DATABASE_URL from the environment if set, else database.yaml."""
    return get_settings().database_url or get_app_config().database.url


def get_server_base_url() -> tuple[str, float]:
    """
    Where the client reaches the backend.

    Returns:
        Tuple of (base_url, timeout_seconds) from application.yaml
    """
    app = get_app_config().application
    return f"http://{app.server.host}:{app.server.port}", float(app.timeouts.external_api)
