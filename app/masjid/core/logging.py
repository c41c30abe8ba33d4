from __future__ import annotations

import json
import logging

from app.masjid.core.config import settings


def configure_logging(level: str | None = None) -> None:
    resolved = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=resolved, format="%(message)s")
    logging.getLogger("masjid").setLevel(resolved)


def log_json(logger: logging.Logger, payload: dict, *, level: int = logging.INFO) -> None:
    if not logger.isEnabledFor(level):
        return
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
