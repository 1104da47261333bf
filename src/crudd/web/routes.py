"""Routes for the dashboard.

The router is built once from the catalog: one GET route per command
(whether or not its executable was found) plus the index page.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

import jinja2
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from fastapi.templating import Jinja2Templates

from crudd import __version__
from crudd.catalog import CommandCatalog
from crudd.domain.models import CommandSpec
from crudd.runner import CommandRun, ProcessLauncher

logger = logging.getLogger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    # Browsers hold back small chunks while sniffing the content type
    "X-Content-Type-Options": "nosniff",
}


def build_router(
    catalog: CommandCatalog,
    templates: Jinja2Templates,
    launcher: ProcessLauncher,
    request_timeout: float | None = None,
) -> APIRouter:
    """Build the dashboard router from an immutable catalog."""
    router = APIRouter(include_in_schema=False)

    @router.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> Response:
        missing = catalog.missing()
        try:
            return templates.TemplateResponse(
                request,
                "index.html",
                {
                    "existing_commands": catalog.existing(),
                    "missing_commands": missing,
                    "missing_count": len(missing),
                    "version": __version__,
                },
            )
        except jinja2.TemplateError as e:
            logger.error("failed to execute template index.html: %s", e)
            return HTMLResponse(f"failed to execute template: {e}")

    for spec in catalog:
        router.add_api_route(
            f"/{spec.name}",
            _command_endpoint(spec, catalog, templates, launcher, request_timeout),
            methods=["GET"],
            response_class=StreamingResponse,
            name=f"command-{spec.name}",
        )
    logger.debug("Registered %d command routes", len(catalog))
    return router


def _command_endpoint(
    spec: CommandSpec,
    catalog: CommandCatalog,
    templates: Jinja2Templates,
    launcher: ProcessLauncher,
    request_timeout: float | None,
) -> Callable[[], Awaitable[StreamingResponse]]:
    executable_path = catalog.resolve_path(spec)

    async def run_command() -> StreamingResponse:
        run = CommandRun(
            spec,
            launcher,
            templates,
            executable_path=executable_path,
            request_timeout=request_timeout,
        )
        return StreamingResponse(
            run.stream(),
            media_type="text/html; charset=utf-8",
            headers=STREAM_HEADERS,
        )

    run_command.__name__ = f"run_{spec.name}"
    return run_command
