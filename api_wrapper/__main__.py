"""Command-line entry point: ``python -m api_wrapper <catalog.yaml>``."""

import argparse
import sys

import uvicorn
from structlog import get_logger

from .catalog import CatalogError, load_catalog
from .config import get_settings
from .log_config import configure_logging
from .main import create_app


def _build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="api-wrapper",
        description="Expose declaratively configured HTTP APIs as MCP tools over SSE.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        default=settings.CATALOG_PATH,
        help=f"Path to the tool catalog YAML (default: {settings.CATALOG_PATH})",
    )
    parser.add_argument("--host", default=settings.HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Listen port (env PORT)")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Log level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level, settings.LOG_JSON)
    logger = get_logger("api_wrapper")

    try:
        catalog = load_catalog(args.config)
    except CatalogError as e:
        sys.stderr.write(f"ERROR: Failed to load configuration: {e.message}\n")
        return 1

    logger.info(
        "server_starting",
        host=args.host,
        port=args.port,
        tools=len(catalog.tools),
        server_name=catalog.server.name,
    )
    uvicorn.run(
        create_app(catalog=catalog, log_level=args.log_level),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
