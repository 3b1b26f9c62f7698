"""Logging configuration models for Zoekt MCP."""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Accepted CLI/env spellings mapped onto loguru level names
_LEVEL_ALIASES = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
}


def _normalize_level(v: str) -> str:
    level = _LEVEL_ALIASES.get(v.strip().upper())
    if level is None:
        raise ValueError(
            f"Invalid log level '{v}'. Must be one of: debug, info, warn, error"
        )
    return level


class FileLoggingConfig(BaseModel):
    """Configuration for file-based logging."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(default="zoekt-mcp.log", description="Path to log file")
    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    rotation: str = Field(default="10 MB", description="Log rotation size (e.g., '10 MB', '1 week')")
    retention: str = Field(default="1 week", description="Log retention period (e.g., '1 week', '30 days')")
    format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        description="Log message format"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        return _normalize_level(v)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate log file path."""
        if not v.strip():
            raise ValueError("Log file path cannot be empty")
        try:
            Path(v)
        except Exception as e:
            raise ValueError(f"Invalid log file path '{v}': {e}")
        return v


class LoggingConfig(BaseModel):
    """Top-level logging configuration."""

    file: FileLoggingConfig = Field(default_factory=FileLoggingConfig)
    level: str = Field(default="INFO", description="Console logging level (debug, info, warn, error)")

    @field_validator("level")
    @classmethod
    def validate_console_level(cls, v: str) -> str:
        """Validate console logging level."""
        return _normalize_level(v)

    def is_enabled(self) -> bool:
        """Check if file logging is enabled."""
        return self.file.enabled

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        """Load logging config from environment variables."""
        config: dict[str, Any] = {}
        if level := os.getenv("LOG_LEVEL"):
            config["level"] = level
        if log_file := os.getenv("ZOEKT_MCP_LOG_FILE"):
            config["file"] = {"enabled": True, "path": log_file}
        return config

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any] | None:
        """Extract logging configuration overrides from CLI arguments.

        Args:
            args: Parsed command line arguments

        Returns:
            Dictionary of logging configuration overrides, or None if no overrides
        """
        overrides: dict[str, Any] = {}

        if hasattr(args, "log_level") and args.log_level:
            overrides["level"] = args.log_level

        file_overrides: dict[str, Any] = {}
        if hasattr(args, "log_file") and args.log_file:
            file_overrides["enabled"] = True
            file_overrides["path"] = args.log_file
        if hasattr(args, "log_level") and args.log_level:
            file_overrides["level"] = args.log_level

        if file_overrides:
            overrides["file"] = file_overrides

        return overrides if overrides else None
