from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from .settings import LogFormat, get_settings


_LOGGING_CONFIGURED = False
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging() -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    settings = get_settings()
    log_format = "%(message)s" if settings.log_format is LogFormat.JSON else _TEXT_FORMAT
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=log_format)
    _LOGGING_CONFIGURED = True



def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
        **fields,
    }
    logger.log(level, json.dumps(payload, default=str, separators=(",", ":")))
