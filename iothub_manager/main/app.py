"""
Main Application - Main Layer

Entry point for the FastAPI application: initializes the container,
creates the app and mounts the versioned routers.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iothub_manager.main.config import AppSettings, get_settings
from iothub_manager.main.container import app_lifespan, init_container
from iothub_manager.presentation.controllers import devices_router, system_router
from iothub_manager.shared import (
    API_PREFIX,
    CONTINUATION_TOKEN_HEADER,
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

# Bootstrap logging from the environment until settings are loaded
configure_logging()

settings = get_settings()

update_logging_from_settings(settings)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Record the start time and run the container lifecycle."""
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("app.starting")

    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("app.shutting_down")


def _add_cors(app: FastAPI, settings: AppSettings) -> None:
    cors = settings.cors
    if not cors.origins:
        logger.info("app.cors.disabled")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.methods,
        allow_headers=cors.headers,
        expose_headers=[CONTINUATION_TOKEN_HEADER],
    )
    logger.info(
        "app.cors.enabled",
        origins=cors.origins,
        methods=cors.methods,
        headers=cors.headers,
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application
    """
    settings = get_settings()

    init_container(settings)

    app = FastAPI(
        title=settings.ge.title,
        description=settings.ge.description,
        version=settings.ge.version,
        debug=settings.ge.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    _add_cors(app, settings)

    app.include_router(devices_router, prefix=API_PREFIX)
    app.include_router(system_router, prefix=API_PREFIX)

    return app


app = create_app()
