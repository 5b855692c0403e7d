"""Logging setup and terminal color helpers.

Colors honour the NO_COLOR and FORCE_COLOR environment variables and are
disabled when the stream is not a TTY.
"""

import logging
import os
import sys
from typing import TextIO

__all__ = [
    "HandlerStyles",
    "LogObjects",
    "colorize",
    "get_logger",
    "init_logger",
    "is_debug",
    "set_debug",
    "should_colorize",
]

_ESC = "\x1b["
RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"

BLACK = "30"
RED = "31"
YELLOW = "33"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Determine if ANSI colors should be used for the given stream.

    Args:
        stream: The output stream to check. Defaults to sys.stderr.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, *codes: str) -> str:
    """Wrap text in ANSI color codes."""
    if not codes:
        return text
    return f"{_ESC}{';'.join(codes)}m{text}{RESET}"


def make_style(*codes: str) -> tuple[str, str]:
    """Create a style prefix and suffix pair."""
    if not codes:
        return ("", RESET)
    return (f"{_ESC}{';'.join(codes)}m", RESET)


class LogStyles:
    """Pre-built styles for log levels."""

    WARNING = (YELLOW, DIM)
    ERROR = (RED, DIM)
    CRITICAL = (RED, BOLD)


class HandlerStyles:
    """Pre-built styles for dispatch logging."""

    COMMAND = (YELLOW, BOLD)  # client commands
    EVENT = (BLACK, BOLD)  # registry notifications


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []
    # verbose mode, from `--debug` or the DEBUG environment variable
    debug: bool = bool(os.environ.get("DEBUG"))


def is_debug() -> bool:
    """Tell whether verbose logging is on."""
    return LogObjects.debug


def set_debug(value: bool) -> None:
    """Switch verbose logging on or off, for loggers created afterwards."""
    LogObjects.debug = value


class ScreenLogFormatter(logging.Formatter):
    """A custom formatter, adding colors based on log level."""

    def __init__(self) -> None:
        super().__init__()
        log_format = r"%(name)25s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        if should_colorize():
            warn_pre, warn_suf = make_style(*LogStyles.WARNING)
            err_pre, err_suf = make_style(*LogStyles.ERROR)
            crit_pre, crit_suf = make_style(*LogStyles.CRITICAL)
        else:
            warn_pre = warn_suf = err_pre = err_suf = crit_pre = crit_suf = ""

        self._formatters = {
            logging.DEBUG: logging.Formatter(log_format),
            logging.INFO: logging.Formatter(log_format),
            logging.WARNING: logging.Formatter(warn_pre + log_format + warn_suf),
            logging.ERROR: logging.Formatter(err_pre + log_format + err_suf),
            logging.CRITICAL: logging.Formatter(crit_pre + log_format + crit_suf),
        }

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters[record.levelno].format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        set_debug(True)

    logging.basicConfig()
    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)


def get_logger(name: str = "winctl", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)
    """
    logger = logging.getLogger(name)
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.info('Logger "%s" initialized', name)
    return logger
