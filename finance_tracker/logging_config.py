"""
Logging setup for the finance tracker entry points.
Library modules only create loggers; handlers are attached here.
"""

import logging
import sys
from typing import Optional

from .config import config

QUIET_LOGGERS = ("urllib3", "httpx", "uvicorn.access")


def _level(name: Optional[str]) -> int:
    level = logging.getLevelName((name or config.LOG_LEVEL).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    Route application logs to stdout and, optionally, a file under LOG_DIR.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_level: Level name, defaults to LOG_LEVEL
        log_file: File name inside LOG_DIR
        console_output: Also log to stdout

    Returns:
        The root logger
    """
    formatter = logging.Formatter(config.LOG_FORMAT, config.LOG_DATE_FORMAT)

    handlers: list[logging.Handler] = []
    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        handlers.append(logging.FileHandler(config.log_path(log_file), encoding='utf-8'))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(_level(log_level))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Module logger, same as logging.getLogger(name)."""
    return logging.getLogger(name)
