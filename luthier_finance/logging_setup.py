"""
Logging configuration for the ``luthier_finance`` package.

Library modules call ``get_logger(__name__)`` and never attach handlers.
Entry points (the CLI) call ``configure_logging()`` once at startup.
"""
import logging
import os
import sys
from typing import IO, Optional, Union

_PKG_LOGGER_NAME = "luthier_finance"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_val = os.getenv("LUTHIER_FINANCE_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(level: Union[int, str, None] = None,
                      fmt: Optional[str] = None,
                      stream: IO[str] = sys.stderr) -> None:
    """
    Attach a single StreamHandler to the package logger (only the first call counts)

    Args:
        level: Level as int or name; defaults to LUTHIER_FINANCE_LOG_LEVEL, then INFO
        fmt: Optional format string
        stream: Output stream (default: stderr)
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    numeric_level = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(numeric_level)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, with a NullHandler on the package root until configured"""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
