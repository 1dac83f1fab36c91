"""Logging configuration for ZenTask.

Everything goes to a date-named file under the configured log directory at
the configured level. The console carries the CLI's reports, so it never
drops below INFO (the engines log every single write at DEBUG) and prints
plain messages, prefixing only warnings and errors with their level.
"""

import logging
from datetime import date
from typing import Optional

from config import Config

LOGGER_NAME = "zentask"


class ConsoleFormatter(logging.Formatter):
    """Plain messages for INFO and below, level-prefixed above."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname} - {message}"
        return message


def setup_logging(config: Config) -> logging.Logger:
    """Set up application logging with file and console handlers.

    Args:
        config: Application configuration containing log settings.

    Returns:
        Configured logger instance.
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.log_level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Called once per CLI run, but tests may call it repeatedly
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_file = config.log_dir / f"{LOGGER_NAME}-{date.today().isoformat()}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(max(level, logging.INFO))
    console_handler.setFormatter(ConsoleFormatter("%(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get the application logger, or one of its children.

    Args:
        name: Module name; records from zentask.<name> reach the same
            handlers and show which module wrote them in the log file.
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
