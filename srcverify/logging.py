"""Logging for srcverify runs inside a package build.

Diagnostics go to stderr so the host build log keeps them apart from the
plan printed on stdout. Records emitted while a file is being handled carry
that file's name as a prefix, which makes the failing signature easy to spot
in a long build log.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, TextIO

_LOGGER_NAME = "srcverify"
_CONSOLE_FORMAT = "[srcverify] %(levelname)s %(subject_prefix)s%(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(subject_prefix)s%(message)s"


class _SubjectFilter(logging.Filter):
    """Stamps records with the file currently being processed."""

    def __init__(self) -> None:
        super().__init__()
        self.subject: Optional[str] = None

    def filter(self, record: logging.LogRecord) -> bool:
        record.subject_prefix = f"{self.subject}: " if self.subject else ""
        return True


_subject_filter = _SubjectFilter()


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


@contextmanager
def log_subject(subject: str) -> Iterator[None]:
    """Prefix records logged inside the block with ``subject``."""
    previous = _subject_filter.subject
    _subject_filter.subject = subject
    try:
        yield
    finally:
        _subject_filter.subject = previous


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Send srcverify diagnostics to stderr (or ``stream``) and an optional file."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # One build may call the tool several times in the same interpreter.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(level)
    console.addFilter(_subject_filter)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(_subject_filter)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger", "log_subject"]
