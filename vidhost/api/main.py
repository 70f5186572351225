"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidhost.api.dependencies import get_settings, init_services, shutdown_services
from vidhost.api.middleware.error_handler import error_handler_middleware
from vidhost.api.middleware.logging import LoggingMiddleware
from vidhost.api.openapi.routes import auth, health, media, upload, videos
from vidhost.commons.settings.models import Settings
from vidhost.commons.telemetry import build_formatter, configure_logging


def _setup_logging() -> None:
    """Configure logging for the application.

    This must be called at module level to ensure our formatters
    are applied before uvicorn starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level
    log_format = settings.telemetry.log_format

    configure_logging(
        level=log_level,
        format_type=log_format,
        logger_name="vidhost",
    )

    # Also configure root logger as fallback
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Configure uvicorn loggers to use our format.

    Called during lifespan when uvicorn handlers are available.
    """
    settings = get_settings()
    level = getattr(logging, settings.telemetry.log_level.upper())
    formatter = build_formatter(settings.telemetry.log_format)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


# Configure logging at module import time
_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown.

    Startup fails with ConfigurationError when blob storage settings are
    incomplete, and with the backend's error when the catalog schema
    cannot be prepared.
    """
    _configure_uvicorn_logging()

    settings = get_settings()
    await init_services(settings)

    yield

    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Video hosting service - upload, catalog and stream videos",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    _register_routes(app)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    # Error handler (as middleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI) -> None:
    """Register API routes.

    Paths carry no version prefix. The listing router goes before the media
    proxy so ``/api/videos/bycreator`` is not taken for a file name.
    """
    app.include_router(health.router, tags=["Health"])
    app.include_router(videos.router, tags=["Videos"])
    app.include_router(auth.router, tags=["Auth"])
    app.include_router(upload.router, tags=["Upload"])
    app.include_router(media.router, tags=["Media"])


# Create default app instance
app = create_app()
