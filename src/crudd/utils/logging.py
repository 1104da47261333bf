"""Logging setup for the crudd server and CLI."""

from __future__ import annotations

import logging
import sys

from crudd.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Attach handlers to the ``crudd`` logger.

    Records go to stderr, and also to ``config.file`` when one is set.
    ``config.verbose`` overrides ``config.level`` with DEBUG, which turns
    on the per-line log of every chunk streamed to a client.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    level = "DEBUG" if config.verbose else config.level
    crudd_logger = logging.getLogger("crudd")
    crudd_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))

    for handler in handlers:
        handler.setFormatter(formatter)
        crudd_logger.addHandler(handler)

    crudd_logger.debug("Streaming output lines will be logged")
    crudd_logger.info("Logging initialized at %s level", level)
