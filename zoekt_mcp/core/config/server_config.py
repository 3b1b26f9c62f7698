"""MCP transport configuration for Zoekt MCP."""

import argparse
import os
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Transport selection and HTTP bind address."""

    transport: Literal["stdio", "http"] = Field(
        default="stdio", description="MCP transport to serve on"
    )
    host: str = Field(default="0.0.0.0", description="HTTP bind host")
    port: int = Field(default=3000, ge=1, le=65535, description="HTTP bind port")

    @field_validator("transport", mode="before")
    @classmethod
    def normalize_transport(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add transport-related CLI arguments."""
        parser.add_argument(
            "--transport",
            "-t",
            choices=["stdio", "http"],
            help="Transport mode (env: MCP_TRANSPORT, default: stdio)",
        )
        parser.add_argument(
            "--host",
            type=str,
            help="HTTP bind host (env: MCP_HOST, default: 0.0.0.0)",
        )
        parser.add_argument(
            "--port",
            "-p",
            type=int,
            help="HTTP port (env: MCP_PORT, default: 3000)",
        )

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        """Load server config from environment variables."""
        config: dict[str, Any] = {}
        if transport := os.getenv("MCP_TRANSPORT"):
            config["transport"] = transport
        if host := os.getenv("MCP_HOST"):
            config["host"] = host
        if port := os.getenv("MCP_PORT"):
            try:
                config["port"] = int(port)
            except ValueError:
                pass
        return config

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any]:
        """Extract server config from CLI arguments."""
        overrides: dict[str, Any] = {}
        if hasattr(args, "transport") and args.transport:
            overrides["transport"] = args.transport
        if hasattr(args, "host") and args.host:
            overrides["host"] = args.host
        if hasattr(args, "port") and args.port is not None:
            overrides["port"] = args.port
        return overrides
