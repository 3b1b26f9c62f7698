"""Zoekt backend configuration for Zoekt MCP.

This module holds the settings needed to reach the Zoekt webserver: its base
URL and the per-call deadline applied to every HTTP request.
"""

import argparse
import os
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator


class ZoektConfig(BaseModel):
    """Zoekt webserver connection settings.

    Configuration can be provided via:
    - Environment variables (ZOEKT_URL, ZOEKT_TIMEOUT_MS)
    - CLI arguments
    - Default values
    """

    url: str | None = Field(
        default=None, description="Base URL of the Zoekt webserver"
    )
    timeout_ms: int = Field(
        default=30000,
        gt=0,
        description="Deadline for each backend request in milliseconds",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Require an http(s) URL and strip the trailing slash."""
        if v is None:
            return v
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid Zoekt URL '{v}'. Must be an http(s) URL")
        return v.rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def is_configured(self) -> bool:
        """Check if the backend URL has been provided."""
        return bool(self.url)

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add Zoekt-related CLI arguments."""
        parser.add_argument(
            "--url",
            "-u",
            type=str,
            help="Zoekt webserver URL (env: ZOEKT_URL)",
        )
        parser.add_argument(
            "--timeout",
            type=int,
            help="Backend request timeout in milliseconds (env: ZOEKT_TIMEOUT_MS, default: 30000)",
        )

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        """Load Zoekt config from environment variables."""
        config: dict[str, Any] = {}
        if url := os.getenv("ZOEKT_URL"):
            config["url"] = url
        if timeout_ms := os.getenv("ZOEKT_TIMEOUT_MS"):
            try:
                config["timeout_ms"] = int(timeout_ms)
            except ValueError:
                # Invalid value - fall back to default
                pass
        return config

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any]:
        """Extract Zoekt config from CLI arguments."""
        overrides: dict[str, Any] = {}
        if hasattr(args, "url") and args.url:
            overrides["url"] = args.url
        if hasattr(args, "timeout") and args.timeout is not None:
            overrides["timeout_ms"] = args.timeout
        return overrides

    def __repr__(self) -> str:
        return f"ZoektConfig(url={self.url}, timeout_ms={self.timeout_ms})"
