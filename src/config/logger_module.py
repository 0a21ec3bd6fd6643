"""
Logging utilities for the Google Maps tools core.

initialize_logger attaches a console and a file handler to the root logger
once per process. The maps modules log through the log_* helpers, which
write to the "google_maps_tools" logger and propagate to whatever the root
logger is configured with.
"""

import logging
from pathlib import Path


LOGGER_NAME = "google_maps_tools"

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'

# Set once initialize_logger has attached its handlers
_logger_initialized = False


def _with_format(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    return handler


def initialize_logger(log_level: str = "INFO", log_file: str = "logs/maps.log") -> None:
    """
    Configure the root logger: console at INFO, file at DEBUG.

    Only the first call has an effect; later calls keep the existing
    handlers and level.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names mean INFO
        log_file: Log file path, parent directories are created
    """
    global _logger_initialized

    if _logger_initialized:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    root_logger.addHandler(_with_format(logging.StreamHandler(), logging.INFO, CONSOLE_FORMAT))
    root_logger.addHandler(_with_format(
        logging.FileHandler(log_file, mode='a', encoding='utf-8'), logging.DEBUG, FILE_FORMAT
    ))

    _logger_initialized = True

    logging.getLogger(LOGGER_NAME).info(f"Logging to {log_file} at level {log_level}")


def log_debug(message: str) -> None:
    """Log a debug message."""
    logging.getLogger(LOGGER_NAME).debug(message)


def log_info(message: str) -> None:
    logging.getLogger(LOGGER_NAME).info(message)


def log_warning(message: str) -> None:
    """Log a warning (rate-limit waits, retries, config fallbacks)."""
    logging.getLogger(LOGGER_NAME).warning(message)


def log_error(message: str) -> None:
    """
    Log an error message.

    Args:
        message: Message to log
    """
    logging.getLogger(LOGGER_NAME).error(message)
