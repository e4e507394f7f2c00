"""Application entry point for the SiliconFlow Flux MCP server."""

from __future__ import annotations

import sys
from typing import Optional

import anyio

from config.settings import ConfigError, load_config
from modules.server.transport import build_server, serve_stdio
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None) -> int:
    """Load configuration and serve MCP requests over stdio."""
    try:
        config = load_config(config_path)
        logger = setup_logging(config)
    except (ConfigError, OSError) as exc:
        print(f"Failed to start server: {exc}", file=sys.stderr)
        return 1

    try:
        server = build_server(config)
        anyio.run(serve_stdio, server)
    except KeyboardInterrupt:
        logger.info("Interrupt received, shutting down")
        return 0
    except Exception:  # noqa: BLE001
        logger.exception("Server stopped after an unexpected error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
