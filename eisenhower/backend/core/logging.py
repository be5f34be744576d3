"""
Logging.

structlog on top of the standard logging module, configured once from
config/settings/logging.yaml by setup_logging().

Every record carries level, logger, event, timestamp and call site. Inside
an HTTP request the middleware also binds request_id, frontend, method and
path. Outside a request, callers name their origin with log_with_source().

Usage:
    from eisenhower.backend.core.logging import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Note created", extra={"note_id": note.id})

Fields named like credentials are masked before rendering.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from eisenhower.backend.core.config import find_project_root, load_yaml_config

VALID_SOURCES = frozenset({"web", "client", "cli", "api", "internal", "unknown"})
"""Values accepted for the `source` field. Set by the caller, never inferred."""

REDACTED = "***"
SENSITIVE_KEYS = frozenset({
    "password",
    "hashed_password",
    "token",
    "access_token",
    "refresh_token",
    "refreshToken",
    "authorization",
    "jwt_secret",
})

_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    """Read logging.yaml once and keep it for later calls."""
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    return find_project_root() / configured_path


def _mask(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if key in SENSITIVE_KEYS else _mask(item)
            for key, item in value.items()
        }
    return value


def redact_sensitive_fields(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask credential fields, including those nested under `extra`."""
    return _mask(event_dict)


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        redact_sensitive_fields,
    ]


def _formatter(renderer: Processor, pre_chain: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)


def _file_handler(file_config: dict[str, Any], formatter: logging.Formatter) -> logging.Handler:
    log_path = _resolve_log_path(file_config["path"])
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structured logging for the process.

    Arguments left as None fall back to logging.yaml.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'json' or 'console' for the console handler
        enable_console: Write records to stdout
        enable_file_logging: Append JSON lines to the configured file
    """
    config = _load_logging_config()
    handlers = config["handlers"]

    level = level if level is not None else config["level"]
    format_type = format_type if format_type is not None else config["format"]
    if enable_console is None:
        enable_console = handlers["console"]["enabled"]
    if enable_file_logging is None:
        enable_file_logging = handlers["file"]["enabled"]

    pre_chain = _shared_processors()
    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), pre_chain)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        if format_type == "console":
            console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=True), pre_chain))
        else:
            console.setFormatter(json_formatter)
        root_logger.addHandler(console)

    if enable_file_logging:
        root_logger.addHandler(_file_handler(handlers["file"], json_formatter))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit `source` field.

    For code that runs outside an HTTP request, such as the client package
    or the entry script.

    Raises:
        AttributeError: If level is not a logger method

    Example:
        log_with_source(logger, "client", "info", "Board loaded", notes=12)
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
