"""Logging helpers shared by the repoviz CLI and analysis pipeline.

Reports go to stdout, so log records are kept on stderr; ``--format json``
output can be piped without filtering.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "repoviz"
_CONSOLE_FORMAT = "[repoviz] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under the ``repoviz`` hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route repoviz records to stderr and, optionally, a file.

    ``quiet`` limits the console to warnings (skipped files, cache write
    failures). The file sink always records debug detail, including the
    worker thread, since files are analysed concurrently.
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    # repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


@contextmanager
def log_phase(logger: logging.Logger, phase: str) -> Iterator[None]:
    """Log the wall-clock duration of one analysis phase at debug level."""
    started = time.monotonic()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", phase, time.monotonic() - started)


__all__ = ["configure_logging", "get_logger", "log_phase"]
