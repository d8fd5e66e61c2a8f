"""
LC-3 Emulator - Logging Setup

Console handler is a rich RichHandler on stderr (stdout belongs to the
emulated machine's console). Optional file handler captures everything
at `file_level` with the pipe-separated format.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "lc3_emulator"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Calling again replaces the previous handlers, so the CLI can be
    invoked repeatedly in one process without duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    # -- Console handler: stderr, WARNING+ by default --
    ch = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)
    levels = [console_level]

    # -- File handler --
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(fh)
        levels.append(file_level)

    logger.setLevel(min(levels))
    if log_file is not None:
        logger.info("Log file: %s", log_file)
    return logger
