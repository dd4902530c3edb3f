"""Logging configuration for the gallery synchronization application."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

APP_LOGGER_PREFIX = "gallery_sync"


class LocationFormatter(logging.Formatter):
    """Base formatter that adds a combined location field."""

    def format(self, record: Any) -> str:
        """Format log record with combined location field."""
        record.location = f"{record.filename}:{record.lineno}"
        return super().format(record)


class ColoredFormatter(LocationFormatter):
    """Colored log formatter for console output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: Any) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset_color = self.COLORS["RESET"]

        # Pad before coloring so escape codes don't break alignment
        original_levelname = record.levelname
        record.levelname = f"{log_color}{original_levelname:<8}{reset_color}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """Set up application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        console_output: Whether to output logs to console
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s - %(location)-30s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_file_size, backupCount=backup_count
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            LocationFormatter(
                fmt="%(asctime)s - %(location)-30s - %(levelname)-8s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    configure_third_party_loggers()

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized - Level: %s", log_level)
    if log_file:
        logger.info("Log file: %s", log_file)


def set_log_level(level: str) -> None:
    """Change the log level for application loggers only.

    Third-party loggers stay at WARNING to reduce noise.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers:
        handler.setLevel(numeric_level)

    for name in list(logging.root.manager.loggerDict):
        if name.startswith(APP_LOGGER_PREFIX):
            logging.getLogger(name).setLevel(numeric_level)

    configure_third_party_loggers()
    logging.getLogger(__name__).debug("Log level changed to: %s", level)


def configure_third_party_loggers() -> None:
    """Configure third-party library loggers to reduce noise."""
    # SQL echo is far too verbose even at DEBUG
    for name in (
        "sqlalchemy",
        "sqlalchemy.engine",
        "sqlalchemy.pool",
        "sqlalchemy.orm",
        "alembic",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)

    # Media libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("mutagen").setLevel(logging.WARNING)
