"""Command-line entry point for the Zoekt MCP server.

Parses arguments, builds the layered configuration, sets up loguru sinks
and starts the selected transport. Stdout is reserved for the stdio
JSON-RPC stream, so every log sink writes to stderr or a file.
"""

import argparse
import asyncio
import sys
from typing import Any

from loguru import logger

from zoekt_mcp.core.config.config import Config
from zoekt_mcp.core.config.logging_config import LoggingConfig
from zoekt_mcp.core.exceptions import ConfigurationError
from zoekt_mcp.version import __version__


def setup_logging(verbose: bool = False, config: Any = None) -> None:
    """Configure loguru sinks.

    Args:
        verbose: Force DEBUG on the console sink
        config: ``LoggingConfig`` or an object with a ``logging`` attribute
    """
    logger.remove()

    logging_config: LoggingConfig | None = None
    if isinstance(config, LoggingConfig):
        logging_config = config
    elif config is not None and isinstance(
        getattr(config, "logging", None), LoggingConfig
    ):
        logging_config = config.logging

    console_level = "DEBUG" if verbose else (
        logging_config.level if logging_config else "INFO"
    )
    logger.add(
        sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "{name}:{function} - {message}"
        ),
    )

    if logging_config and logging_config.file.enabled:
        file_config = logging_config.file
        logger.add(
            file_config.path,
            level="DEBUG" if verbose else file_config.level,
            rotation=file_config.rotation,
            retention=file_config.retention,
            format=file_config.format,
            enqueue=True,
        )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zoekt-mcp",
        description="MCP server exposing Zoekt code search as paginated tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  zoekt-mcp --url http://localhost:6070\n"
            "  zoekt-mcp --url http://zoekt:6070 --transport http --port 3001\n"
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"zoekt-mcp {__version__}"
    )
    Config.add_cli_arguments(parser)
    return parser


async def run_server(config: Config) -> None:
    """Start the configured transport and block until it exits."""
    if config.server.transport == "http":
        from zoekt_mcp.mcp_server.http_server import HTTPMCPServer

        await HTTPMCPServer(config).run()
    else:
        from zoekt_mcp.mcp_server.stdio import StdioMCPServer

        await StdioMCPServer(config).run()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.load(args)
    except ConfigurationError as e:
        setup_logging(verbose=bool(getattr(args, "debug", False)))
        logger.error(str(e))
        sys.exit(1)

    setup_logging(verbose=config.debug, config=config)

    errors = config.validate_for_server()
    if errors:
        for error in errors:
            logger.error(error)
        sys.exit(1)

    logger.info(
        f"Starting zoekt-mcp {__version__} ({config.server.transport} transport, "
        f"zoekt={config.zoekt.url})"
    )

    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
