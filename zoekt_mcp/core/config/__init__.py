"""Configuration models for Zoekt MCP."""

from .config import Config
from .logging_config import FileLoggingConfig, LoggingConfig
from .server_config import ServerConfig
from .zoekt_config import ZoektConfig

__all__ = [
    "Config",
    "FileLoggingConfig",
    "LoggingConfig",
    "ServerConfig",
    "ZoektConfig",
]
