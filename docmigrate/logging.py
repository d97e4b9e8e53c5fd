"""Logging utilities for docmigrate commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .models import TransformIssue

_LOGGER_NAME = "docmigrate"
_CONSOLE_FORMAT = "[docmigrate] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docmigrate hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """``--verbose`` shows per-file debug output; ``--quiet`` leaves only warnings."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the docmigrate logger.

    Console output goes to stderr so the migration report printed on stdout
    stays machine-readable. The optional log file always records debug
    output, including every per-file issue.
    """
    level = console_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def log_issues(logger: logging.Logger, display: str, issues: Iterable[TransformIssue]) -> None:
    """Mirror per-file issues at debug level; the report stays the authoritative record."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for issue in issues:
        logger.debug("%s:%d: %s %s", display, issue.line, issue.kind, issue.message)


__all__ = ["configure_logging", "console_level", "get_logger", "log_issues"]
