# roomchat/core/logging.py

import logging
import os
import sys
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level_name: Optional[str] = None) -> None:
    """
    Configure logging for the chat hub process.

    - Level comes from Settings.LOG_LEVEL (falls back to the LOG_LEVEL env var)
    - Connection, join/leave and message lines from the hub go to stdout
    - When uvicorn has installed handlers already, only the level is changed
    """
    log_level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level_name, logging.INFO)

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Per-frame protocol chatter from the websocket stack stays out of the hub log
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Logger for a roomchat module.

    Usage:
        from roomchat.core.logging import get_logger

        logger = get_logger(__name__)
        logger.info("→ %s joined '%s'", username, room)
    """
    return logging.getLogger(name)
