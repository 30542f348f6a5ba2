"""
Logging for the indicator engine.

Provides human-readable console logs (coloured by level) and an optional
dated log file. All loggers live under the "streamta" namespace; nothing is
emitted until setup_logger() attaches handlers, so importing the library
never configures the host application's logging.

The streaming hot path (Indicator.update) never logs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

ROOT_LOGGER_NAME = "streamta"


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        # Format a copy so file handlers sharing the record stay uncoloured
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        record.msg = f"{color}{record.getMessage()}{Colors.RESET}"
        record.args = None
        return super().format(record)


def setup_logger(
    log_level: str | None = None,
    log_dir: str | None = None,
    log_to_file: bool | None = None,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the "streamta" logger.

    Arguments left as None fall back to the environment-driven Config.
    Calling again replaces the previously attached handlers.
    """
    from streamta.config import get_config

    log_config = get_config().log
    level = (log_level or log_config.level).upper()
    directory = log_dir or log_config.log_dir
    to_file = log_config.log_to_file if log_to_file is None else log_to_file

    if level not in logging.getLevelNamesMapping():
        raise ValueError(
            f"Unknown log level '{level}'\n"
            f"\n"
            f"Fix: STREAMTA_LOG_LEVEL=INFO"
        )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColoredFormatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    ))
    logger.addHandler(console_handler)

    if to_file:
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        log_file = path / f"streamta_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the "streamta" namespace (e.g. get_logger("factory"))."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
