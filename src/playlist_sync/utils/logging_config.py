"""Logging configuration for the playlist sync application.

Sync work runs on the router and watchdog threads, so every line carries the
thread name next to the source location.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, TextIO

CONSOLE_FORMAT = (
    "%(asctime)s %(threadName)-12s %(location)-24s %(levelname)s %(message)s"
)
FILE_FORMAT = (
    "%(asctime)s %(threadName)-12s %(location)-24s %(levelname)-8s %(message)s"
)

# Libraries whose INFO/DEBUG chatter drowns out sync messages
NOISY_LOGGERS = ("sqlalchemy", "alembic", "watchdog")

LEVEL_COLORS: Dict[int, str] = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET = "\033[0m"


class SyncLogFormatter(logging.Formatter):
    """Formatter adding a ``location`` field and optional level colors."""

    def __init__(
        self,
        fmt: str = FILE_FORMAT,
        datefmt: Optional[str] = None,
        use_color: bool = False,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Log format, may reference ``%(location)s``
            datefmt: Date format for ``%(asctime)s``
            use_color: Wrap the padded level name in ANSI colors
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: Any) -> str:
        """Format the record without altering it for other handlers."""
        record.location = f"{record.filename}:{record.lineno}"
        if not self.use_color:
            return super().format(record)

        levelname = record.levelname
        color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{levelname:<8}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def stream_supports_color(stream: Any) -> bool:
    """Whether ANSI colors should be written to ``stream``."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    stream: Optional[TextIO] = None,
) -> None:
    """Set up application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file
        console_output: Whether to log to the console
        max_file_size: Maximum size of the log file before rotation
        backup_count: Number of rotated log files to keep
        stream: Console stream, stdout by default
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if console_output:
        stream = stream if stream is not None else sys.stdout
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(
            SyncLogFormatter(
                CONSOLE_FORMAT,
                datefmt="%H:%M:%S",
                use_color=stream_supports_color(stream),
            )
        )
        root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            SyncLogFormatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized - Level: %s", log_level)
    if log_file:
        logger.info("Log file: %s", log_file)


def configure_third_party_loggers(
    names: Iterable[str] = NOISY_LOGGERS, level: int = logging.WARNING
) -> None:
    """Raise the level of chatty library loggers and their children."""
    for name in names:
        logging.getLogger(name).setLevel(level)
