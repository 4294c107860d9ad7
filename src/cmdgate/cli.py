"""Command-line interface for cmdgate.

Provides the main entry point for serving the gateway and for checking
a route file without starting the server.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="cmdgate",
        description="HTTP-triggered command execution gateway",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Route file (default: ./config.yml)",
    )
    parser.add_argument(
        "-l", "--log",
        type=str,
        default=None,
        help="Write log to stdout, stderr, or a file; '' discards (default: stdout)",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="Port to listen on (default: 1307)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: 0.0.0.0)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    subparsers.add_parser("serve", help="Start the gateway server (default)")
    subparsers.add_parser("routes", help="Validate the route file and list its routes")

    return parser.parse_args(argv)


def _print_routes(table) -> None:
    """Print one line per route with its command and allow-list."""
    if not table:
        print("No routes configured.")
        return
    width = max(len(path) for path in table)
    for path in sorted(table):
        spec = table[path]
        argv = " ".join([spec.command, *spec.args])
        allow = ",".join(sorted(f.value for f in spec.allow)) or "-"
        print(f"{path:<{width}}  {argv}  [allow: {allow}]")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the cmdgate CLI."""
    args = parse_args(argv)

    from cmdgate.config.routes import RouteTableError, load_route_table
    from cmdgate.config.settings import load_settings
    from cmdgate.utils.logging import setup_logging

    settings = load_settings()
    if args.config is not None:
        settings.routes_file = args.config
    if args.log is not None:
        settings.logging.target = args.log
    if args.port is not None:
        settings.server.port = args.port
    if args.host is not None:
        settings.server.host = args.host
    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    try:
        table = load_route_table(settings.routes_file)
    except RouteTableError as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    if args.command == "routes":
        _print_routes(table)
        return

    logger.info("Starting gateway on %s:%d", settings.server.host, settings.server.port)
    from cmdgate.gateway.server import create_app
    import uvicorn

    app = create_app(
        table,
        callback_timeout=settings.callback.timeout,
        callback_user_agent=settings.callback.user_agent,
    )
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
