# -*- coding: utf-8 -*-
"""
Logging configuration.

All modules log through children of the ``portfolio`` logger:

    logger = get_logger(__name__)
    logger.info("Draft saved")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

ROOT_LOGGER_NAME = "portfolio"

# Will be set by setup_logger
_logger: Optional[logging.Logger] = None


def setup_logger(log_path: Optional[Path] = None,
                 console_level: int = logging.INFO) -> logging.Logger:
    """
    Setup application logger with a rotating file handler and console output.

    Args:
        log_path: Override for the log file (defaults to Config.LOG_PATH)
        console_level: Minimum level echoed to stdout
    """
    global _logger

    # Import here to avoid circular imports
    from app.config import Config

    log_path = Path(log_path) if log_path else Config.LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Clear existing handlers
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=Config.LOG_MAX_BYTES,
        backupCount=Config.LOG_BACKUP_COUNT,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt=Config.DATETIME_FORMAT
    ))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
    logger.addHandler(console_handler)

    _logger = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a module.
    """
    global _logger

    if _logger is None:
        _logger = setup_logger()

    return _logger.getChild(name)


def format_context(**context: Any) -> str:
    """Render correlation fields as ``key=value`` pairs, skipping empty ones."""
    return " ".join(
        f"{key}={value}" for key, value in context.items()
        if value is not None and value != ""
    )
