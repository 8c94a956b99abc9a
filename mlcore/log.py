import logging
import sys
from typing import TextIO

from mlcore.constants import APP_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Pillow logs every chunk it parses at DEBUG
_NOISY_LOGGERS = ("PIL",)


def parse_level(level: str | int) -> int:
    """Numeric logging level for a name or number, INFO when unknown"""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str | int = "INFO", stream: TextIO | None = None) -> None:
    """
    Route all records through one console handler.

    Args:
        level: Level name or number for the root logger
        stream: Target stream, defaults to stdout
    """
    log_level = parse_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # Third-party decoders never go below INFO
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger for a module, or the package logger when no name is given"""
    return logging.getLogger(name or APP_NAME)
