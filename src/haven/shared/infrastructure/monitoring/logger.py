"""
Logging setup for Haven.

Services call ``get_logger(__name__)``; the first call configures the
``haven`` logger from settings. The root logger is left to the host
application.
"""

import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from ...config.settings import get_settings


PACKAGE_LOGGER = 'haven'

NOISY_LOGGERS = ('urllib3', 'google', 'grpc', 'httpx')


def _build_handlers(log_file: Optional[str], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


@lru_cache()
def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger once per process.

    Args:
        level: Overrides the configured level ("DEBUG" when ``debug`` is set)
        log_file: Overrides the configured log file

    Returns:
        The ``haven`` logger
    """
    settings = get_settings()
    config = settings.logging_config

    level_name = level or ('DEBUG' if settings.debug else config['level'])
    formatter = logging.Formatter(config['format'], datefmt='%Y-%m-%d %H:%M:%S')

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    logger.handlers.clear()
    for handler in _build_handlers(log_file or config['file'], formatter):
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


@lru_cache()
def get_logger(name: str) -> logging.Logger:
    """Logger for a module, with package logging configured."""
    setup_logging()
    return logging.getLogger(name)
