"""Tests for logging configuration and loguru sink setup."""

import argparse
from unittest.mock import patch

import pytest

from zoekt_mcp.api.cli.main import setup_logging
from zoekt_mcp.core.config.config import Config
from zoekt_mcp.core.config.logging_config import FileLoggingConfig, LoggingConfig


class TestFileLoggingConfig:
    """Test FileLoggingConfig validation and functionality."""

    def test_file_logging_config_defaults(self):
        """Test default file logging configuration."""
        config = FileLoggingConfig()
        assert config.enabled is False
        assert config.path == "zoekt-mcp.log"
        assert config.level == "INFO"
        assert config.rotation == "10 MB"
        assert config.retention == "1 week"
        assert "time" in config.format

    def test_file_logging_invalid_level(self):
        """Test that invalid log levels raise ValueError."""
        with pytest.raises(ValueError, match="Invalid log level"):
            FileLoggingConfig(level="INVALID")

    def test_file_logging_invalid_path_empty(self):
        """Test that empty paths raise ValueError."""
        with pytest.raises(ValueError, match="Log file path cannot be empty"):
            FileLoggingConfig(path="")

    @pytest.mark.parametrize(
        "level,expected",
        [
            ("debug", "DEBUG"),
            ("info", "INFO"),
            ("warn", "WARNING"),
            ("WARNING", "WARNING"),
            ("error", "ERROR"),
        ],
    )
    def test_level_aliases(self, level, expected):
        assert FileLoggingConfig(level=level).level == expected


class TestLoggingConfig:
    """Test top-level LoggingConfig functionality."""

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.is_enabled() is False

    def test_console_level_alias(self):
        assert LoggingConfig(level="warn").level == "WARNING"

    def test_extract_cli_overrides_no_args(self):
        """Test CLI override extraction with no logging args."""
        overrides = LoggingConfig.extract_cli_overrides(argparse.Namespace())
        assert overrides is None

    def test_extract_cli_overrides_file_logging(self):
        """Test CLI override extraction for file logging."""
        args = argparse.Namespace(log_file="/tmp/test.log", log_level="debug")
        overrides = LoggingConfig.extract_cli_overrides(args)
        assert overrides is not None
        assert overrides["level"] == "debug"
        assert overrides["file"]["enabled"] is True
        assert overrides["file"]["path"] == "/tmp/test.log"
        assert overrides["file"]["level"] == "debug"

    def test_extract_cli_overrides_partial_file_args(self):
        """Test CLI override extraction with only log_file (no level)."""
        args = argparse.Namespace(log_file="/tmp/test.log", log_level=None)
        overrides = LoggingConfig.extract_cli_overrides(args)
        assert overrides is not None
        assert "level" not in overrides["file"]
        assert "level" not in overrides

    def test_load_from_env(self, clean_environment, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        monkeypatch.setenv("ZOEKT_MCP_LOG_FILE", "/tmp/zoekt.log")

        config = LoggingConfig(**LoggingConfig.load_from_env())

        assert config.level == "ERROR"
        assert config.file.enabled is True
        assert config.file.path == "/tmp/zoekt.log"


class TestSetupLogging:
    """Test setup_logging function behavior."""

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_no_config(self, mock_logger):
        """Console only, at INFO."""
        setup_logging(verbose=False, config=None)

        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_count == 1
        assert mock_logger.add.call_args_list[0].kwargs["level"] == "INFO"

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_uses_configured_level(self, mock_logger):
        setup_logging(verbose=False, config=LoggingConfig(level="warn"))

        assert mock_logger.add.call_args_list[0].kwargs["level"] == "WARNING"

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_verbose(self, mock_logger):
        """Verbose forces DEBUG on the console sink."""
        setup_logging(verbose=True, config=LoggingConfig(level="error"))

        first_call = mock_logger.add.call_args_list[0]
        assert first_call.kwargs["level"] == "DEBUG"

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_never_writes_stdout(self, mock_logger):
        import sys

        setup_logging(verbose=False, config=None)

        sink = mock_logger.add.call_args_list[0].args[0]
        assert sink is sys.stderr

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_file_sink(self, mock_logger):
        """File logging adds a rotating sink with the configured settings."""
        config = LoggingConfig(
            file=FileLoggingConfig(
                enabled=True, path="/tmp/zoekt.log", level="debug", rotation="1 day"
            )
        )
        setup_logging(verbose=False, config=config)

        assert mock_logger.add.call_count == 2
        file_call = mock_logger.add.call_args_list[1]
        assert file_call.args[0] == "/tmp/zoekt.log"
        assert file_call.kwargs["level"] == "DEBUG"
        assert file_call.kwargs["rotation"] == "1 day"
        assert file_call.kwargs["retention"] == "1 week"

    @patch("zoekt_mcp.api.cli.main.logger")
    def test_setup_logging_accepts_full_config(self, mock_logger):
        config = Config(logging=LoggingConfig(file=FileLoggingConfig(enabled=True)))
        setup_logging(verbose=False, config=config)

        assert mock_logger.add.call_count == 2
        assert mock_logger.add.call_args_list[1].args[0] == "zoekt-mcp.log"
