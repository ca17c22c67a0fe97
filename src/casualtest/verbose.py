"""Output channel and debug logging configuration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

DEFAULT_LOGGER_NAME = "casualtest"


class _BelowError(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def setup_logger(
    debug_file: Path | None = None,
    verbose: bool = False,
    logger_name: str = DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """
    Configure and return the logger suites flush their messages to.

    Info lines go to stdout and error lines to stderr, unformatted, so suite
    output reads like plain console output.

    Args:
        debug_file: Optional path to a debug log file. When given, every
            record (including DEBUG diagnostics) is also written there with
            a timestamp.
        verbose: If True, DEBUG diagnostics are echoed to stdout as well.
        logger_name: Name of the logger instance (allows multiple independent loggers)

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)

    # Clear any existing handlers for this specific logger
    logger.handlers.clear()

    logger.disabled = False
    logger.propagate = False
    logger.setLevel(logging.DEBUG if (verbose or debug_file) else logging.INFO)

    plain = logging.Formatter(fmt="%(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    stdout_handler.addFilter(_BelowError())
    stdout_handler.setFormatter(plain)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(plain)
    logger.addHandler(stderr_handler)

    if debug_file is not None:
        debug_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(debug_file, mode="a")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def get_output_logger(logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Return the named output logger, configuring defaults on first use."""
    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        setup_logger(logger_name=logger_name)
    return logger
