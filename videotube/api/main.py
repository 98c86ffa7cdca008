"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from videotube.api.dependencies import get_settings, init_services, shutdown_services
from videotube.api.middleware.error_handler import error_handler_middleware
from videotube.api.middleware.logging import LoggingMiddleware
from videotube.api.openapi.routes import health, stream, upload, videos
from videotube.commons.settings.models import Settings
from videotube.commons.telemetry import build_formatter, configure_logging


def _log_level(settings: Settings) -> str:
    return settings.telemetry.log_level or settings.app.log_level


def _setup_logging() -> None:
    """Configure the package logger.

    Runs at import time so the formatters are in place before uvicorn starts.
    """
    settings = get_settings()
    log_level = _log_level(settings)

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="videotube",
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Give uvicorn's loggers our formatter once its handlers exist."""
    settings = get_settings()
    level = getattr(logging, _log_level(settings).upper())
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


_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Prepare storage on startup and close clients on shutdown."""
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
        description="Video upload, thumbnailing and range streaming service",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
    )
    app.add_middleware(LoggingMiddleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    prefix = settings.server.api_prefix

    # Health routes (no prefix for standard health checks)
    app.include_router(health.router, tags=["Health"])

    app.include_router(upload.router, prefix=prefix, tags=["Upload"])
    app.include_router(videos.router, prefix=prefix, tags=["Videos"])
    app.include_router(stream.router, prefix=prefix, tags=["Streaming"])


# Create default app instance
app = create_app()
