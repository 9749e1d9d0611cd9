"""Logging configuration."""
import logging
import os
import sys
from pathlib import Path
from typing import Optional


# Singleton logger instance
_logger = None
_initialized = False


def _get_log_path() -> Optional[Path]:
    """Get the log file path from environment, if file logging is enabled."""
    # Environment only, to avoid a circular import with config
    logs_path = os.getenv("JESTER_LOGS_PATH")
    if not logs_path:
        return None
    return Path(logs_path) / "jester.log"


def _get_log_level() -> int:
    """Get log level from environment or default."""
    level_str = os.getenv("JESTER_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_logger() -> logging.Logger:
    """Get or create the singleton logger instance."""
    global _logger, _initialized

    if _logger is None:
        _logger = logging.getLogger("jester")
        _logger.setLevel(_get_log_level())
        _logger.propagate = False

    if not _initialized:
        _logger.handlers.clear()

        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        _logger.addHandler(console_handler)

        log_path = _get_log_path()
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            _logger.addHandler(file_handler)

        _initialized = True

    return _logger


# Export the singleton logger
logger = get_logger()
