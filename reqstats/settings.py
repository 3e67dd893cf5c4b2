from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache


class LogFormat(StrEnum):
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    log_format: LogFormat
    stats_path: str



def _get_port() -> int:
    raw = os.environ.get("REQSTATS_PORT", "8000").strip()
    try:
        port = int(raw)
    except ValueError as exc:
        raise ValueError(f"REQSTATS_PORT must be an integer, got {raw!r}") from exc
    if not 0 < port < 65536:
        raise ValueError(f"REQSTATS_PORT must be between 1 and 65535, got {port}")
    return port



def _get_log_format() -> LogFormat:
    value = os.environ.get("REQSTATS_LOG_FORMAT", LogFormat.JSON).strip().lower()
    try:
        return LogFormat(value)
    except ValueError as exc:
        valid = ", ".join(fmt.value for fmt in LogFormat)
        raise ValueError(f"REQSTATS_LOG_FORMAT must be one of: {valid}") from exc



def _get_stats_path() -> str:
    path = os.environ.get("REQSTATS_STATS_PATH", "/stats").strip()
    if not path.startswith("/"):
        raise ValueError("REQSTATS_STATS_PATH must start with '/'")
    return path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        host=os.environ.get("REQSTATS_HOST", "0.0.0.0"),
        port=_get_port(),
        log_level=os.environ.get("REQSTATS_LOG_LEVEL", "INFO").upper(),
        log_format=_get_log_format(),
        stats_path=_get_stats_path(),
    )
