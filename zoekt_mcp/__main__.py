"""Entry point for running the server as a module: python -m zoekt_mcp.

This enables:
    python -m zoekt_mcp --url http://localhost:6070
    python -m zoekt_mcp --url http://zoekt:6070 --transport http --port 3001
"""

from zoekt_mcp.api.cli.main import main

if __name__ == "__main__":
    main()
