"""Logging configuration for applications embedding the expression engine."""
import logging
import sys
import os
from typing import Optional

LOG_LEVEL_ENV_VAR = "SERIOUS_LOG_LEVEL"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PACKAGE_LOGGER_NAME = "serious"

# Marks the handler setup_logging installed so a second call can replace it
_HANDLER_ATTR = "_serious_setup_logging"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure logging for the `serious` package loggers.

    The library itself only logs at DEBUG; call this to see the lexer,
    parser and evaluator trace. Calling it again replaces the handler
    installed by the previous call instead of stacking another one.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to $SERIOUS_LOG_LEVEL, then INFO.
        log_file: Optional path to log file. If None, logs to stdout.

    Returns:
        The configured package logger.
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").upper()
    # Convert string level to logging constant
    numeric_level = getattr(logging, level_name, logging.INFO)

    if log_file:
        # Ensure directory exists
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)

    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for existing in list(package_logger.handlers):
        if getattr(existing, _HANDLER_ATTR, False):
            package_logger.removeHandler(existing)
            existing.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)

    package_logger.info("Logging initialized at %s level", level_name)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
