"""
Application factory for the notes API.

    uvicorn eisenhower.backend.main:app

`app` is built on first attribute access, so importing this module never
reads configuration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eisenhower.backend.api import health
from eisenhower.backend.api.routes import router as api_router
from eisenhower.backend.core.config import AppConfig, get_app_config, get_settings
from eisenhower.backend.core.database import create_tables, dispose_engine
from eisenhower.backend.core.exception_handlers import register_exception_handlers
from eisenhower.backend.core.logging import get_logger, setup_logging
from eisenhower.backend.core.middleware import RequestContextMiddleware

logger = get_logger(__name__)

_app: FastAPI | None = None


def run_startup_checks() -> None:
    """
    Refuse to start with a weak JWT signing secret.

    Raises:
        RuntimeError: If the secret is shorter than the configured minimum
    """
    min_length = get_app_config().security.secrets_validation.jwt_secret_min_length
    if len(get_settings().jwt_secret) < min_length:
        logger.critical("JWT secret too short", extra={"min_length": min_length})
        raise RuntimeError(f"JWT_SECRET must be at least {min_length} characters")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config = get_app_config()
    setup_logging(level=config.logging.level)

    if config.features.security_startup_checks_enabled:
        run_startup_checks()
    if config.features.database_create_tables_on_startup:
        await create_tables()

    logger.info(
        "Application starting",
        extra={"app_name": config.application.name, "env": config.application.environment},
    )
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("Application shutting down")


def _add_middleware(app: FastAPI, config: AppConfig) -> None:
    # Added last runs first: CORS answers preflights before request tagging.
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=config.features.api_request_logging,
    )
    origins = config.application.cors.origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )


def create_app() -> FastAPI:
    """Build the API: middleware, error envelope, health and /auth, /notes routes."""
    config = get_app_config()
    docs = config.application.debug

    app = FastAPI(
        title=config.application.name,
        description=config.application.description,
        version=config.application.version,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        lifespan=lifespan,
    )
    _add_middleware(app, config)
    register_exception_handlers(app)
    app.include_router(health.router, tags=["health"])
    app.include_router(api_router)
    return app


def get_app() -> FastAPI:
    """The process-wide application, created on first call."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> FastAPI:
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
