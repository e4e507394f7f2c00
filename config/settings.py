"""Configuration helpers for the SiliconFlow Flux MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ConfigError(RuntimeError):
    """Raised when the server cannot start with the current settings."""


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    siliconflow_key: Optional[str] = None
    base_url: str = "https://api.siliconflow.cn"
    image_endpoint: str = "/v1/images/generations"
    model_id: str = "black-forest-labs/FLUX.1-schnell"
    num_inference_steps: int = 20
    guidance_scale: float = 7.5
    batch_size: int = 1
    history_capacity: int = 10
    request_timeout: Optional[float] = None
    resource_scheme: str = "siliconflow"
    resource_namespace: str = "flux"
    server_name: str = "siliconflow-flux-image-server"
    server_version: str = "0.1.0"
    log_level: str = "INFO"
    log_dir: Optional[Path] = Path("logs")

    @property
    def image_generation_url(self) -> str:
        return self.base_url.rstrip("/") + self.image_endpoint


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        # Real environment wins over the file.
        os.environ.setdefault(key.strip(), value.strip().strip("\"'"))


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigError(f"{name} must be a positive integer, got {value}")
    return value


def _float_env(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {value}")
    return value


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig built from the environment and an optional .env file.

    Raises ConfigError when SILICONFLOW_API_KEY is missing or a numeric
    setting cannot be parsed.
    """
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = (os.getenv("SILICONFLOW_API_KEY") or "").strip()
    if not api_key:
        raise ConfigError(
            "SILICONFLOW_API_KEY environment variable is required; "
            "set it in the environment or in your .env file."
        )

    defaults = AppConfig()
    log_dir_env = os.getenv("LOG_DIR")
    if log_dir_env is None:
        log_dir: Optional[Path] = defaults.log_dir
    else:
        log_dir = Path(log_dir_env).expanduser() if log_dir_env.strip() else None

    return AppConfig(
        siliconflow_key=api_key,
        base_url=os.getenv("SILICONFLOW_BASE_URL") or defaults.base_url,
        model_id=os.getenv("SILICONFLOW_IMAGE_MODEL") or defaults.model_id,
        history_capacity=_int_env("SILICONFLOW_HISTORY_SIZE", defaults.history_capacity),
        request_timeout=_float_env("SILICONFLOW_TIMEOUT"),
        log_level=(os.getenv("LOG_LEVEL") or defaults.log_level).upper(),
        log_dir=log_dir,
    )
