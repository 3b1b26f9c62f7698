"""Command-line entry point for Zoekt MCP."""
