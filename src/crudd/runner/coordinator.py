"""Per-request lifecycle of a command run.

``CommandRun.stream()`` is the body of the streaming HTTP response. It
moves through ``RunPhase.STARTING -> STREAMING -> AWAITING_EXIT -> DONE``:
the header goes out before the command starts, output lines follow as
they are read, and the exit code is only written once the process has
actually exited. If the response stops early (client disconnect) or the
request deadline passes, the cancellation event is set and the reaper
task kills the child and reaps it on its own.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import aclosing
from typing import Any, AsyncIterator

import jinja2
from fastapi.templating import Jinja2Templates

from crudd.domain.models import CommandSpec, RunPhase
from crudd.runner.launcher import ProcessLauncher
from crudd.runner.relay import relay

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = "command_header.html"
FOOTER_TEMPLATE = "command_footer.html"


def render_fragment(templates: Jinja2Templates, name: str, **context: Any) -> str:
    """Render a template to a string, or an inline error if rendering fails."""
    try:
        return templates.get_template(name).render(**context)
    except jinja2.TemplateError as e:
        logger.error("failed to execute template %s: %s", name, e)
        return f"failed to execute template: {e}"


class CommandRun:
    """Runs one catalog command for one request.

    Args:
        spec: The catalog entry to run.
        executable_path: Path actually executed (after any fs root prefix).
        launcher: Starts the subprocess.
        templates: Provides the header and footer fragments.
        request_timeout: Optional deadline in seconds after which the
                         command is killed.
    """

    def __init__(
        self,
        spec: CommandSpec,
        launcher: ProcessLauncher,
        templates: Jinja2Templates,
        executable_path: str | None = None,
        request_timeout: float | None = None,
    ) -> None:
        self._spec = spec
        self._launcher = launcher
        self._templates = templates
        self._executable_path = executable_path or spec.path
        self._request_timeout = request_timeout
        self.phase = RunPhase.STARTING
        self.exit_code: int | None = None

    async def stream(self) -> AsyncIterator[str]:
        self.phase = RunPhase.STARTING
        yield render_fragment(self._templates, HEADER_TEMPLATE, title=self._spec.title)

        loop = asyncio.get_running_loop()
        cancelled = asyncio.Event()
        deadline = None
        if self._request_timeout is not None:
            deadline = loop.call_later(self._request_timeout, self._expire, cancelled)

        started = time.perf_counter()
        run = await self._launcher.launch(self._executable_path, self._spec.args, cancelled)
        try:
            self.phase = RunPhase.STREAMING
            async with aclosing(relay(run.output, run.drained)) as lines:
                async for line in lines:
                    yield line

            self.phase = RunPhase.AWAITING_EXIT
            try:
                self.exit_code = await asyncio.shield(run.exit_code)
            except Exception as e:
                logger.error("No exit code for %s: %s", self._spec.name, e)
                yield f"\nCommand exit status unavailable: {e}"
            else:
                logger.info(
                    "Command took %.6fs to run and exited with code %d",
                    time.perf_counter() - started, self.exit_code,
                )
                yield f"\nCommand exited with code: {self.exit_code}"

            yield render_fragment(self._templates, FOOTER_TEMPLATE)
            self.phase = RunPhase.DONE
        finally:
            if deadline is not None:
                deadline.cancel()
            if not run.exit_code.done():
                # Response abandoned before the command finished
                cancelled.set()

    def _expire(self, cancelled: asyncio.Event) -> None:
        logger.warning(
            "Command %s exceeded the %.1fs request timeout", self._spec.name, self._request_timeout
        )
        cancelled.set()
