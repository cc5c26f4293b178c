"""Logging configuration for wt-core.

All wt-core loggers hang off the ``wt`` logger, so configuring it leaves the
root logger (and GitPython's ``git.cmd`` chatter) alone. Log records only ever
reach stderr or the debug log file; stdout belongs to command output.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAMESPACE = "wt"
LOG_DIR = Path.home() / ".wt-core"
LOG_FILE_NAME = "wt-core.log"

DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
SHORT_FORMAT = "wt-core: %(message)s"

_RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",     # Cyan
    logging.INFO: "\033[32m",      # Green
    logging.WARNING: "\033[33m",   # Yellow
    logging.ERROR: "\033[31m",     # Red
    logging.CRITICAL: "\033[35m",  # Magenta
}


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the whole line by level when stderr is a terminal."""

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_color: Optional[bool] = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = sys.stderr.isatty() if use_color is None else use_color

    def format(self, record):
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            return f"{color}{line}{_RESET}"
        return line


def _level_for(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def _file_handler() -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_DIR / LOG_FILE_NAME, mode="w")  # One run per file
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=DEBUG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure the ``wt`` logger for one invocation.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages with timestamps and also
            write them to ``~/.wt-core/wt-core.log``
    """
    level = _level_for(verbose, debug)
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if debug:
        console_handler.setFormatter(ColoredFormatter(DEBUG_FORMAT, datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(ColoredFormatter(SHORT_FORMAT))
    logger.addHandler(console_handler)

    if debug:
        try:
            logger.addHandler(_file_handler())
        except OSError as e:
            logger.warning(f"Could not open debug log in {LOG_DIR}: {e}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a wt-core module.

    Args:
        name: Module name (typically ``__name__``), e.g.
            ``wt_core.services.git.runner`` becomes ``wt.git.runner``

    Returns:
        Logger under the ``wt`` namespace
    """
    if name.startswith("wt_core."):
        name = name[len("wt_core."):]
    if name.startswith("services."):
        name = name[len("services."):]
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
