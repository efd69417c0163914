"""Application-wide logging configuration."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from core.config import DATA_DIR

_LOGGING_INITIALIZED = False


def setup_logging() -> None:
    """Configure root logging once for console + rotating file output."""

    global _LOGGING_INITIALIZED
    if _LOGGING_INITIALIZED:
        return

    log_dir = DATA_DIR / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    handlers = [
        logging.StreamHandler(),
        RotatingFileHandler(
            filename=log_dir / "ratingsbot.log",
            maxBytes=2 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        ),
    ]

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )
    # requests/urllib3 log every connection at DEBUG, including query strings with api keys.
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
    _LOGGING_INITIALIZED = True
