"""Relay of subprocess output to an HTTP response body.

Each line of the merged output stream becomes one HTML-escaped chunk.
The streaming response sends every chunk as soon as it is yielded, so
the browser renders output while the command is still running.
"""

from __future__ import annotations

import asyncio
import html
import logging
from typing import AsyncIterator

logger = logging.getLogger(__name__)


def format_line(raw: bytes) -> str:
    """Strip the line terminator from ``raw`` and escape it for HTML."""
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return html.escape(raw.decode("utf-8", errors="replace")) + "\n"


async def relay(output: asyncio.StreamReader, drained: asyncio.Event) -> AsyncIterator[str]:
    """Yield escaped output lines until end of stream or a read error.

    ``drained`` is set when relaying stops, whatever the reason. A final
    line without a trailing newline is still yielded.
    """
    try:
        while True:
            try:
                raw = await output.readline()
            except (OSError, ValueError) as e:
                logger.error("failed to stream output: %s", e)
                break
            if not raw:
                break
            line = format_line(raw)
            logger.debug("Streamed %d bytes to client: %s", len(raw), line.rstrip("\n"))
            yield line
    finally:
        drained.set()
