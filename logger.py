"""Logging configuration for StockPilot.

Everything goes to a dated log file. The console doubles as the CLI's
output channel, so informational lines are printed bare and only warnings
and errors carry a level prefix.
"""

import logging
from datetime import date
from typing import Optional
from config import Config

LOGGER_NAME = "stockpilot"


class ConsoleFormatter(logging.Formatter):
    """Plain messages for INFO and below, "LEVEL - message" above."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname} - {message}"
        return message


def get_log_file_path(config: Config, day: Optional[date] = None):
    """Path of the log file for a given day (today by default)."""
    day = day or date.today()
    return config.log_dir / f"stockpilot-{day.isoformat()}.log"


def setup_logging(config: Config) -> logging.Logger:
    """Attach the file and console handlers to the stockpilot logger.

    Safe to call more than once; previous handlers are replaced.

    Args:
        config: Application configuration containing log settings.

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)
    logger.handlers.clear()

    # Category and supplier names are often accented
    file_handler = logging.FileHandler(get_log_file_path(config), encoding="utf-8")
    file_handler.setLevel(config.log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(config.log_level)
    console_handler.setFormatter(ConsoleFormatter())

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger(LOGGER_NAME)
