"""
Logging setup for the chunking engine.

Library code only calls get_logger(); nothing is printed until an
application calls setup_logging(). Handlers installed here are tagged,
so a repeated call replaces them without touching handlers added by
the caller.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "docchunker"
LEVEL_ENV_VAR = "DOCCHUNKER_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_HANDLER_TAG = "_docchunker_handler"


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _tagged(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the ``docchunker`` logger.

    Args:
        level: Level as int or name ("DEBUG"); defaults to
            DOCCHUNKER_LOG_LEVEL, then INFO
        log_file: Optional path to an additional log file
        format_string: Optional custom format string
        propagate: Also pass records on to the root logger

    Returns:
        The package logger
    """
    resolved = _resolve_level(level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = propagate

    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_tagged(logging.StreamHandler(sys.stdout), resolved, formatter))
    if log_file:
        logger.addHandler(_tagged(logging.FileHandler(log_file, encoding="utf-8"), resolved, formatter))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``docchunker`` namespace; module names are prefixed."""
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
