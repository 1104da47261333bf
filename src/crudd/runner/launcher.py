"""Subprocess launcher for catalog commands.

Starts a command with stdout and stderr merged into a single pipe and
hands back a ``RunningProcess``. Each launched process gets one reaper
task that waits for either the output to be drained or the request to be
cancelled, kills the child on cancellation, discards any output the
relay left unread, and then always waits for the child to exit so no
zombie or open pipe is left behind.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from typing import cast

from crudd.domain.models import LAUNCH_FAILURE_EXIT_CODE, RunningProcess, split_arguments

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 5.0
DEFAULT_MAX_LINE_BYTES = 64 * 1024

# Strong references to running reaper tasks; the event loop only keeps weak ones
_reapers: set[asyncio.Task[None]] = set()


def terminate(process: asyncio.subprocess.Process) -> None:
    """Kill ``process``. A process that has already exited is not an error."""
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def _wait_for_either(first: asyncio.Event, second: asyncio.Event) -> None:
    waiters = [asyncio.ensure_future(first.wait()), asyncio.ensure_future(second.wait())]
    try:
        await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for waiter in waiters:
            waiter.cancel()


class ProcessLauncher:
    """Launches catalog commands as subprocesses.

    Args:
        grace_period: Seconds to wait for the child to exit once its output
                      is drained or it has been killed. When this runs out the
                      child is killed and waited on without a bound.
        max_line_bytes: Longest output line the relay will accept.
    """

    def __init__(
        self,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        self._grace_period = grace_period
        self._max_line_bytes = max_line_bytes

    @property
    def grace_period(self) -> float:
        return self._grace_period

    async def launch(
        self,
        executable_path: str,
        argument_string: str,
        cancelled: asyncio.Event,
    ) -> RunningProcess:
        """Start ``executable_path`` with whitespace-split arguments.

        Never raises for a command that cannot be started. The returned
        output then holds a single error line and the exit code is already
        resolved to ``LAUNCH_FAILURE_EXIT_CODE``.

        Args:
            executable_path: Path of the executable to run.
            argument_string: Arguments, separated by whitespace.
            cancelled: Set when the originating request goes away; the
                       child is then killed.
        """
        loop = asyncio.get_running_loop()
        exit_code: asyncio.Future[int] = loop.create_future()
        argv = [executable_path, *split_arguments(argument_string)]
        logger.info("Executing cmd: %s", shlex.join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                limit=self._max_line_bytes,
            )
        except (OSError, ValueError) as e:
            message = f"failed to run {executable_path}: {e}"
            logger.warning(message)
            exit_code.set_result(LAUNCH_FAILURE_EXIT_CODE)
            return RunningProcess(
                output=self._message_stream(message),
                exit_code=exit_code,
                cancelled=cancelled,
            )

        run = RunningProcess(
            output=cast(asyncio.StreamReader, process.stdout),
            exit_code=exit_code,
            cancelled=cancelled,
            process=process,
        )
        run.reaper = asyncio.create_task(self._reap(run, process), name=f"crudd-reap-{process.pid}")
        _reapers.add(run.reaper)
        run.reaper.add_done_callback(_reapers.discard)
        logger.debug("Started pid %d", process.pid)
        return run

    async def _reap(self, run: RunningProcess, process: asyncio.subprocess.Process) -> None:
        """Wait for the child to exit and publish its exit code exactly once."""
        try:
            await _wait_for_either(run.drained, run.cancelled)
            if run.cancelled.is_set():
                logger.info("Request cancelled early, killing pid %d", process.pid)
                terminate(process)

            try:
                returncode = await asyncio.wait_for(
                    self._finish(run, process), timeout=self._grace_period
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "pid %d still running %.1fs after its output ended, killing it",
                    process.pid, self._grace_period,
                )
                terminate(process)
                returncode = await self._finish(run, process)
        except asyncio.CancelledError:
            terminate(process)
            if not run.exit_code.done():
                run.exit_code.cancel()
            raise
        except Exception as e:
            logger.exception("Failed to reap pid %d", process.pid)
            if not run.exit_code.done():
                run.exit_code.set_exception(e)
            return

        logger.debug("pid %d exited with code %d", process.pid, returncode)
        if not run.exit_code.done():
            run.exit_code.set_result(returncode)

    async def _finish(self, run: RunningProcess, process: asyncio.subprocess.Process) -> int:
        """Empty the pipe, then wait for the exit status.

        Once the relay has stopped, whatever it left unread (after a read
        error, for instance) is discarded here. A pipe nobody reads stays
        paused and the exit status is never delivered.
        """
        await run.drained.wait()
        while await run.output.read(self._max_line_bytes):
            pass
        return await process.wait()

    def _message_stream(self, message: str) -> asyncio.StreamReader:
        reader = asyncio.StreamReader(limit=self._max_line_bytes)
        reader.feed_data(message.encode())
        reader.feed_eof()
        return reader
