"""
Runtime configuration for the CanvasLab backend.
All values come from environment variables with demo-friendly defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    crop_min_size: float
    crop_default_fraction: float
    job_poll_interval: float  # seconds between status checks
    job_poll_max_attempts: int
    mock_job_ticks: int  # polls a mock job needs before it completes
    max_upload_bytes: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        env=os.getenv("ENV", "development").lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        crop_min_size=_env_float("CROP_MIN_SIZE", 20.0),
        crop_default_fraction=_env_float("CROP_DEFAULT_FRACTION", 0.8),
        job_poll_interval=_env_float("JOB_POLL_INTERVAL", 0.5),
        job_poll_max_attempts=_env_int("JOB_POLL_MAX_ATTEMPTS", 120),
        mock_job_ticks=_env_int("MOCK_JOB_TICKS", 3),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 20 * 1024 * 1024),
    )
