#!/usr/bin/env python3

"""
Server Configuration

Runtime settings loaded from environment variables with defaults.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Optional, Tuple

_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
_logging_configured = False


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the payload reduction server"""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    temp_dir: str = tempfile.gettempdir()
    ffmpeg_binary: str = "ffmpeg"
    max_upload_mb: float = 50.0
    cors_origins: Tuple[str, ...] = ("*",)
    provider_workers: int = 2

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)


def load_config() -> ServerConfig:
    """Load configuration from environment variables."""
    defaults = ServerConfig()
    origins = os.getenv("SHRINKRAY_CORS_ORIGINS")

    return ServerConfig(
        host=os.getenv("SHRINKRAY_HOST", defaults.host),
        port=_env_int("SHRINKRAY_PORT", defaults.port),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        temp_dir=os.getenv("SHRINKRAY_TEMP_DIR", defaults.temp_dir),
        ffmpeg_binary=os.getenv("SHRINKRAY_FFMPEG", defaults.ffmpeg_binary),
        max_upload_mb=_env_float("SHRINKRAY_MAX_UPLOAD_MB", defaults.max_upload_mb),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) if origins else defaults.cors_origins,
        provider_workers=max(1, _env_int("SHRINKRAY_WORKERS", defaults.provider_workers))
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once."""
    global _logging_configured
    if _logging_configured:
        return

    log_level = getattr(logging, (level or os.getenv("LOG_LEVEL") or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=_LOG_FORMAT)
    _logging_configured = True
