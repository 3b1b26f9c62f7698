"""Aggregate configuration for Zoekt MCP.

Values are layered with the following precedence (highest first):

1. CLI arguments
2. Environment variables
3. Defaults
"""

import argparse
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from zoekt_mcp.core.exceptions import ConfigurationError

from .logging_config import LoggingConfig
from .server_config import ServerConfig
from .zoekt_config import ZoektConfig


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config(BaseModel):
    """Complete server configuration."""

    zoekt: ZoektConfig = Field(default_factory=ZoektConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = Field(default=False, description="Include tracebacks in error responses")

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Register every configuration flag on the parser."""
        ZoektConfig.add_cli_arguments(parser)
        ServerConfig.add_cli_arguments(parser)
        parser.add_argument(
            "--log-level",
            "-l",
            choices=["debug", "info", "warn", "error"],
            help="Log level (env: LOG_LEVEL, default: info)",
        )
        parser.add_argument(
            "--log-file",
            type=str,
            help="Also write logs to this file (env: ZOEKT_MCP_LOG_FILE)",
        )
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode (verbose logging, tracebacks in errors)",
        )

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if zoekt := ZoektConfig.load_from_env():
            config["zoekt"] = zoekt
        if server := ServerConfig.load_from_env():
            config["server"] = server
        if logging_cfg := LoggingConfig.load_from_env():
            config["logging"] = logging_cfg
        return config

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        if zoekt := ZoektConfig.extract_cli_overrides(args):
            overrides["zoekt"] = zoekt
        if server := ServerConfig.extract_cli_overrides(args):
            overrides["server"] = server
        if logging_cfg := LoggingConfig.extract_cli_overrides(args):
            overrides["logging"] = logging_cfg
        if getattr(args, "debug", False):
            overrides["debug"] = True
        return overrides

    @classmethod
    def load(cls, args: Any = None) -> "Config":
        """Build a validated configuration from env and optional CLI args.

        Args:
            args: Parsed argparse namespace, or None to use env and defaults only

        Returns:
            Validated Config instance

        Raises:
            ConfigurationError: If any value fails validation
        """
        data = cls.load_from_env()
        if args is not None:
            data = _deep_merge(data, cls.extract_cli_overrides(args))
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def validate_for_server(self) -> list[str]:
        """Return the list of problems preventing the server from starting."""
        errors: list[str] = []
        if not self.zoekt.is_configured():
            errors.append(
                "Zoekt URL is required. Set ZOEKT_URL or pass --url "
                "(e.g. --url http://localhost:6070)"
            )
        return errors
