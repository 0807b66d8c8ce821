"""Logging setup for the cc_screener logger tree.

Modules log through ``logging.getLogger("cc_screener.<area>")``; this module
only attaches handlers to the ``cc_screener`` parent once, from the CLI.
"""

import logging
import sys
from typing import Optional
from pathlib import Path

from .error_handling import ConfigurationError

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP client loggers that flood DEBUG output with connection pool chatter
NOISY_LOGGERS = ("urllib3", "requests")


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the screener logger.

    Calling it again replaces the handlers rather than stacking them. HTTP
    client libraries are held at WARNING unless ``log_level`` is DEBUG.

    Args:
        log_level: Level name, case-insensitive (e.g. "info", "DEBUG")
        log_file: Also append to this file, creating parent directories
        log_format: Formatter string (defaults to DEFAULT_FORMAT)

    Raises:
        ConfigurationError: If log_level is not a standard level name
    """
    level_name = str(log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {log_level}")

    logger = logging.getLogger("cc_screener")
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(log_format or DEFAULT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return logger
