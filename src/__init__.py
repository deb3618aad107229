import logging
import sys
from pathlib import Path
from typing import TextIO

from pythonjsonlogger import json as jsonlogger

ROOT = Path(__file__).parent.absolute()

_PLAIN_FORMAT: str = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"
_JSON_FORMAT: str = "%(asctime)s %(name)s %(levelname)s %(message)s"
_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def _build_formatter(structured: bool) -> logging.Formatter:
    """Return the JSON formatter when `structured` is set, else the plain text one."""
    if structured:
        return jsonlogger.JsonFormatter(
            fmt=_JSON_FORMAT,
            datefmt=_DATE_FORMAT,
            # Include extra fields passed via logger.info(..., extra={...})
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger_name",
            },
        )
    return logging.Formatter(fmt=_PLAIN_FORMAT, datefmt=_DATE_FORMAT)


def create_logger(
    name: str = "logger",
    log_level: int = logging.INFO,
    log_file: str | Path | None = None,
    structured: bool = False,
    stream: TextIO = sys.stderr,
) -> logging.Logger:
    """
    Create a configured logger with plain text or structured JSON output.

    Parameters:
    -----------
    name : str, optional
        Name of the logger, by default 'logger'
    log_level : int, optional
        Logging level, by default logging.INFO
    log_file : str | Path, optional
        Path to log file. If None, logs to the console only, by default None
    structured : bool, optional
        If True, outputs JSON-formatted logs. If False, uses plain text format, by default False
    stream : TextIO, optional
        Console stream. Defaults to stderr so log lines never mix with CLI output on stdout.

    Returns:
    --------
    logging.Logger
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Clear any existing handlers
    logger.handlers.clear()
    formatter = _build_formatter(structured)

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_log_level(log_level: int | str, prefix: str = "") -> None:
    """Change the level of every logger created through `create_logger`.

    Parameters
    ----------
    log_level : int | str
        New level, e.g. logging.DEBUG or "DEBUG".
    prefix : str, optional
        Only loggers whose name starts with this prefix are touched, by default all.
    """
    level: int = logging.getLevelName(log_level.upper()) if isinstance(log_level, str) else log_level
    for name, logger in logging.root.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger) or not name.startswith(prefix):
            continue
        if not logger.handlers:
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


__all__ = ["ROOT", "create_logger", "set_log_level"]
