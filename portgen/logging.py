"""Logging utilities for portgen commands."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import TranslationError

_LOGGER_NAME = "portgen"
_CONSOLE_FORMAT = "[portgen] %(levelname)s %(message)s"
_VERBOSE_FORMAT = "[portgen] %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the portgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the portgen logger.

    Console output goes to stderr so that `portgen show` can print the
    declaration on stdout. `quiet` keeps only warnings and errors and loses
    against `verbose`.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def log_translation_error(logger: logging.Logger, exc: TranslationError) -> None:
    """Report a translation failure with its type path."""
    logger.error("Cannot translate %s: %s", exc.location, exc.detail)
    if logger.isEnabledFor(logging.DEBUG) and exc.path:
        for depth, segment in enumerate(exc.path):
            logger.debug("%s%s", "  " * depth, segment)


__all__ = ["configure_logging", "get_logger", "log_translation_error"]
