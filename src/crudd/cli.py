"""Command-line interface for crudd.

Provides the main entry point for serving the dashboard and for
inspecting which catalog commands are available on this host.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="crudd",
        description="Diagnostics dashboard that streams system commands to the browser",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/crudd.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging, including every streamed line",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the dashboard HTTP server")
    serve_parser.add_argument("--host", type=str, default=None, help="Interface to bind")
    serve_parser.add_argument("--port", type=int, default=None, help="Server port")
    serve_parser.add_argument(
        "--fs-root", type=str, default=None,
        help="Fake filesystem root prepended to every command path",
    )
    serve_parser.add_argument(
        "--timeout", type=float, default=None,
        help="Kill commands still running after this many seconds",
    )

    subparsers.add_parser("list", help="List catalog commands and whether they are available")

    return parser.parse_args(argv)


def _list_commands(settings) -> None:
    from crudd.web.server import build_catalog

    catalog = build_catalog(settings)
    width = max((len(spec.name) for spec in catalog), default=0)
    for spec in catalog:
        state = "available" if spec.exists else "missing"
        print(f"{spec.name:<{width}}  {state:<9}  {spec.title}")
    print(f"\n{len(catalog.existing())} of {len(catalog)} commands available")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the crudd CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from crudd.config.settings import load_settings
    from crudd.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.verbose = True

    setup_logging(settings.logging)

    if args.command == "serve":
        if args.host is not None:
            settings.server.host = args.host
        if args.port is not None:
            settings.server.port = args.port
        if args.fs_root is not None:
            settings.runner.fs_root = args.fs_root
        if args.timeout is not None:
            settings.runner.request_timeout = args.timeout

        logger.info("Starting dashboard server")
        from crudd.web.server import serve

        serve(settings)

    elif args.command == "list":
        _list_commands(settings)


if __name__ == "__main__":
    main()
