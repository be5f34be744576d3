"""
YAML configuration models.

One model per file in config/settings/. AppConfig builds them at startup,
so a misspelt key, a wrong type or a missing entry stops the process with
the file name and field path instead of surfacing later as a KeyError.

    application.yaml  ApplicationSchema
    database.yaml     DatabaseSchema
    logging.yaml      LoggingSchema
    features.yaml     FeaturesSchema
    security.yaml     SecuritySchema
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    """Unknown keys are errors."""

    model_config = ConfigDict(extra="forbid")


# application.yaml


class ServerSchema(_Section):
    host: str
    port: int = Field(gt=0, lt=65536)


class CorsSchema(_Section):
    origins: list[str]


class TimeoutsSchema(_Section):
    """Seconds."""

    database: int = Field(gt=0)
    external_api: int = Field(gt=0)


class NotesSchema(_Section):
    quadrant_capacity: int = Field(gt=0)


class ApplicationSchema(_Section):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    server: ServerSchema
    cors: CorsSchema
    timeouts: TimeoutsSchema
    notes: NotesSchema


# database.yaml


class DatabaseSchema(_Section):
    url: str
    echo: bool
    # Pool settings are not passed to SQLite engines.
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int


# logging.yaml


class ConsoleHandlerSchema(_Section):
    enabled: bool


class FileHandlerSchema(_Section):
    enabled: bool
    path: str
    max_bytes: int = Field(gt=0)
    backup_count: int = Field(ge=0)


class HandlersSchema(_Section):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_Section):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    format: Literal["console", "json"]
    handlers: HandlersSchema


# features.yaml


class FeaturesSchema(_Section):
    api_request_logging: bool
    security_startup_checks_enabled: bool
    database_create_tables_on_startup: bool


# security.yaml


class JwtSchema(_Section):
    algorithm: Literal["HS256", "HS384", "HS512"]
    access_token_expire_minutes: int = Field(gt=0)
    audience: str


class RefreshTokenSchema(_Section):
    num_bytes: int = Field(ge=16)


class SecretsValidationSchema(_Section):
    jwt_secret_min_length: int = Field(gt=0)


class SecuritySchema(_Section):
    jwt: JwtSchema
    refresh_token: RefreshTokenSchema
    secrets_validation: SecretsValidationSchema
