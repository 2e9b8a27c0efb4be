"""Errors raised by pathkit itself.

Backend failures (missing files, permission problems, non-empty directories)
are the native ``OSError`` subclasses and propagate unchanged. The types here
cover the conditions the path layer detects on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

__all__ = ["PathError", "ResolutionError", "ShortWriteError", "log_failure"]


class PathError(Exception):
    """Base error for path operations."""

    pass


class ResolutionError(PathError):
    """The working directory or an absolute path could not be computed.

    The original ``OSError`` is available as ``__cause__``.
    """

    pass


class ShortWriteError(PathError):
    """A write committed fewer bytes than it was given."""

    def __init__(self, written: int, expected: int) -> None:
        """Initialize short write error.

        Args:
            written: Number of bytes the backend reported as written.
            expected: Number of bytes supplied by the caller.
        """
        super().__init__(f"short write: wrote {written} of {expected} bytes")
        self.written = written
        self.expected = expected


@contextmanager
def log_failure(logger: logging.Logger, action: str, path: str) -> Iterator[None]:
    """Log a failing filesystem call at debug level and re-raise it.

    Args:
        logger: Logger of the calling module.
        action: Name of the primitive, such as ``unlink``.
        path: Path the primitive was called on.
    """
    try:
        yield
    except OSError as e:
        logger.debug("%s %s failed: %s", action, path, e)
        raise
