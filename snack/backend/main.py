"""
Snack API application factory.

Serve with ``uvicorn snack.backend.main:app``; ``app`` is built lazily on
first attribute access so importing this module never reads config.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from snack.backend.api import health
from snack.backend.api.extension import router as extension_router
from snack.backend.api.v1 import router as api_v1_router
from snack.backend.core.config import AppConfig, get_app_config
from snack.backend.core.database import dispose_engine
from snack.backend.core.dependencies import require_feature
from snack.backend.core.exception_handlers import register_exception_handlers
from snack.backend.core.logging import get_logger, setup_logging
from snack.backend.integrations.avatars import avatar_directory
from snack.backend.core.middleware import ExtensionCorsMiddleware, RequestContextMiddleware
from snack.backend.core.startup_checks import run_startup_checks

logger = get_logger(__name__)

EXTENSION_PREFIX = "/api/extension"

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_config = get_app_config()
    setup_logging(level=app_config.logging.level, format_type=app_config.logging.format)

    if app_config.features.security_startup_checks_enabled:
        run_startup_checks()

    logger.info(
        "Application starting",
        extra={
            "app_name": app_config.application.name,
            "env": app_config.application.environment,
            "version": app_config.application.version,
        },
    )
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("Application shutting down")


def _add_middleware(app: FastAPI, app_config: AppConfig) -> None:
    """Order matters: the last middleware added is the outermost."""
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=app_config.features.api_request_logging,
    )

    origins = app_config.application.cors.origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=app_config.security.cors.allow_methods,
            allow_headers=app_config.security.cors.allow_headers,
        )

    # Outside CORSMiddleware so extension preflights never reach the origin allowlist
    extension = app_config.security.extension
    app.add_middleware(
        ExtensionCorsMiddleware,
        path_prefix=EXTENSION_PREFIX,
        allow_methods=extension.allow_methods,
        allow_headers=extension.allow_headers,
    )


def create_app() -> FastAPI:
    app_config = get_app_config()
    application = app_config.application

    app = FastAPI(
        title=application.name,
        description=application.description,
        version=application.version,
        docs_url="/docs" if application.docs_enabled else None,
        redoc_url="/redoc" if application.docs_enabled else None,
        lifespan=lifespan,
    )

    _add_middleware(app, app_config)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_v1_router, prefix=application.api_prefix)
    app.include_router(
        extension_router,
        prefix=EXTENSION_PREFIX,
        dependencies=[Depends(require_feature("extension_enabled"))],
    )
    # Created on first upload
    app.mount(
        app_config.integrations.avatars.url_path,
        StaticFiles(directory=avatar_directory(), check_dir=False),
        name="avatars",
    )
    return app


def get_app() -> FastAPI:
    global _app
    if _app is None:
        _app = create_app()
    return _app


def __getattr__(name: str) -> FastAPI:
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
