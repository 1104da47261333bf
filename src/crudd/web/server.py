"""FastAPI application for the diagnostics dashboard.

The app is assembled from explicit collaborators (settings, catalog,
launcher) so tests can inject their own; nothing is registered globally.
"""

from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from crudd import __version__
from crudd.catalog import DEFAULT_COMMANDS, CommandCatalog
from crudd.config.settings import Settings
from crudd.runner import ProcessLauncher
from crudd.web.middleware import AccessLogMiddleware
from crudd.web.routes import build_router

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).parent
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"


def build_catalog(settings: Settings) -> CommandCatalog:
    """Catalog from the configured commands, or the built-in defaults."""
    if settings.commands is not None:
        commands = [command.model_dump() for command in settings.commands]
    else:
        commands = list(DEFAULT_COMMANDS)
    return CommandCatalog(commands, fs_root=settings.runner.fs_root)


def create_app(
    settings: Settings | None = None,
    catalog: CommandCatalog | None = None,
    launcher: ProcessLauncher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()
    if catalog is None:
        catalog = build_catalog(settings)
    if launcher is None:
        launcher = ProcessLauncher(
            grace_period=settings.runner.grace_period,
            max_line_bytes=settings.runner.max_line_bytes,
        )
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("CRUDD is starting up")
        logger.info(
            "CRUDD is ready to handle requests (%d of %d commands available)",
            len(catalog.existing()), len(catalog),
        )
        yield
        logger.info("CRUDD has been shut down")

    app = FastAPI(
        title="CRUDD",
        description="Streams local diagnostic commands to the browser",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.catalog = catalog
    app.state.launcher = launcher
    app.state.templates = templates

    app.add_middleware(AccessLogMiddleware)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(
        build_router(
            catalog,
            templates,
            launcher,
            request_timeout=settings.runner.request_timeout,
        )
    )
    return app


def serve(settings: Settings) -> None:
    """Run the dashboard under uvicorn until interrupted."""
    app = create_app(settings)
    logger.info("Listening on %s:%d", settings.server.host, settings.server.port)
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        access_log=False,
        timeout_graceful_shutdown=math.ceil(settings.runner.grace_period),
    )
