"""Logging helpers."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import AppConfig


def _file_handler(log_dir: Path) -> tuple[Optional[logging.Handler], Optional[str]]:
    """Return a file handler in log_dir, or the reason it cannot be created."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_dir / "application.log", encoding="utf-8"), None
    except OSError as exc:
        return None, str(exc)


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure and return a logger.

    Everything goes to stderr (and optionally a log file); stdout carries
    the MCP stdio stream. An unusable log directory leaves stderr only.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error = None
    if config.log_dir is not None:
        file_handler, file_error = _file_handler(Path(config.log_dir))
        if file_handler is not None:
            handlers.insert(0, file_handler)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )
    logger = logging.getLogger("siliconflow_flux_mcp")
    if file_error is not None:
        logger.warning("File logging disabled, cannot use %s: %s", config.log_dir, file_error)
    return logger
