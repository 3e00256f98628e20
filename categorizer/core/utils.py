"""Shared utility functions for the Firefly AI Categorizer project."""

import logging
from datetime import UTC, datetime
from pathlib import Path

import colorlog

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "firefly-categorizer"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s" + LOG_FORMAT,
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Set the level of every project logger and optionally add a persistent log file."""
    level = logging.DEBUG if debug else logging.INFO
    file_handler = None
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    names = [ROOT_LOGGER_NAME] + [
        name for name in logging.root.manager.loggerDict if name.startswith(f"{ROOT_LOGGER_NAME}.")
    ]
    for name in names:
        logger = get_logger(name)
        logger.setLevel(level)
        # Add file handler for persistent logs (not colorized)
        if file_handler and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
            logger.addHandler(file_handler)


def utcnow_iso() -> str:
    """Get the current UTC time as an ISO8601 string."""
    return datetime.now(UTC).isoformat()
