"""Logging utilities for docsnip extraction and injection runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docsnip"
_CONSOLE_FORMAT = "[docsnip] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under the ``docsnip`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Install console (and optional file) handlers on the docsnip logger.

    ``verbose`` enables per-file debug output from the directory walker,
    ``quiet`` limits the console to warnings such as snippet errors and
    grouping conflicts. File sinks always receive the full level.
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

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def format_location(path: str, start_line: int, end_line: int | None = None) -> str:
    """Render ``path(start-end)`` the way snippet locations appear in logs."""
    if end_line is None or end_line == start_line:
        return f"{path}({start_line})"
    return f"{path}({start_line}-{end_line})"


__all__ = ["configure_logging", "format_location", "get_logger"]
