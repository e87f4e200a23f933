"""
Logging configuration shared by the headless runner and the web server.

Logs go to the console and, when a log file is configured, to a rotating
file as well.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from ..sim.core.config import LoggingConfig


def setup_logging(config: LoggingConfig) -> None:
    level = config.level.upper()
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicate output when called twice.
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Rotates at 1MB, keeps 5 backups.
        file_handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logging.getLogger(__name__).debug("logging initialized at %s (file: %s)", level, config.log_file)
