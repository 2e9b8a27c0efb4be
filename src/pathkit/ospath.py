"""Paths on the operating system's filesystem."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from pathkit.errors import PathError, ResolutionError, ShortWriteError, log_failure
from pathkit.filesystem import OsFile, open_os_file
from pathkit.protocols import Path
from pathkit.types import ACCESS_MODE_MASK, DEFAULT_DIR_MODE, DEFAULT_FILE_MODE

__all__ = ["OsPath", "new"]

logger = logging.getLogger(__name__)


def _getcwd() -> str:
    """Query the process working directory; never cached."""
    return os.getcwd()


@dataclass(frozen=True)
class OsPath:
    """A path on the real filesystem.

    Every operation delegates to the matching ``os`` primitive and lets its
    OSError propagate. Satisfies the Path protocol structurally.

    Attributes:
        path: The path string, absolute or relative, as given.
    """

    path: str

    def __str__(self) -> str:
        return self.path

    def string(self) -> str:
        """Return the stored path string verbatim."""
        return self.path

    def absolute(self) -> OsPath:
        """Return an absolute representation of this path.

        Raises:
            ResolutionError: If the working directory cannot be determined.
        """
        try:
            resolved = os.path.abspath(self.path)
        except OSError as e:
            raise ResolutionError(f"get absolute failed: {e}") from e
        return OsPath(resolved)

    def cwd(self) -> OsPath:
        """Return a path pointing to the current working directory.

        Raises:
            ResolutionError: If the working directory cannot be determined.
        """
        try:
            return OsPath(_getcwd())
        except OSError as e:
            raise ResolutionError(f"get cwd failed: {e}") from e

    def parent(self) -> OsPath:
        """Return the parent of the absolute form of this path.

        Raises:
            ResolutionError: If the absolute form cannot be computed.
        """
        try:
            resolved = self.absolute()
        except ResolutionError as e:
            raise ResolutionError(f"get parent failed: {e}") from e
        return OsPath(os.path.dirname(resolved.path))

    def join_path(self, *segments: str) -> OsPath:
        """Combine this path with one or several segments."""
        return OsPath(os.path.normpath(os.path.join(self.path, *segments)))

    def touch(self) -> None:
        """Create the file with mode 0o666 (before umask), truncating it if present."""
        with log_failure(logger, "touch", self.path):
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, DEFAULT_FILE_MODE)
        os.close(fd)

    def unlink(self) -> None:
        """Remove this file or link. Directories are refused."""
        with log_failure(logger, "unlink", self.path):
            os.unlink(self.path)

    def rmdir(self) -> None:
        """Remove this directory. The directory must be empty."""
        with log_failure(logger, "rmdir", self.path):
            os.rmdir(self.path)

    def mkdir(self, mode: int = DEFAULT_DIR_MODE, parents: bool = False) -> None:
        """Create a new directory at this path.

        Args:
            mode: Permission bits, before umask.
            parents: Create missing ancestors; existing directories are accepted.
        """
        with log_failure(logger, "mkdir", self.path):
            if parents:
                os.makedirs(self.path, mode, exist_ok=True)
            else:
                os.mkdir(self.path, mode)

    def open(self) -> OsFile:
        """Open this file for reading."""
        with log_failure(logger, "open", self.path):
            return open_os_file(self.path, os.O_RDONLY)

    def open_rw(self, flags: int = 0, mode: int = DEFAULT_FILE_MODE) -> OsFile:
        """Open this file for reading and writing.

        Any access mode in ``flags`` is replaced by ``O_RDWR``.

        Args:
            flags: Extra ``os.O_*`` flags such as ``O_CREAT`` or ``O_APPEND``.
            mode: Permission bits used when the file is created.
        """
        with log_failure(logger, "open_rw", self.path):
            return open_os_file(self.path, (flags & ~ACCESS_MODE_MASK) | os.O_RDWR, mode)

    def chmod(self, mode: int) -> None:
        """Change the mode of this path."""
        with log_failure(logger, "chmod", self.path):
            os.chmod(self.path, mode)

    def rename(self, target: Path) -> None:
        """Move this path to ``target``.

        Raises:
            PathError: If ``target`` is not on the real filesystem.
        """
        if not isinstance(target, OsPath):
            logger.debug("Refusing rename of %s to %r", self.path, target)
            raise PathError(f"cannot rename {self.path} to a {type(target).__name__}")
        with log_failure(logger, "rename", self.path):
            os.rename(self.path, target.path)

    def exists(self) -> bool:
        """Check if this path exists."""
        try:
            os.stat(self.path)
        except FileExistsError:
            return True
        except (OSError, ValueError):
            return False
        return True

    def is_dir(self) -> bool:
        """Check if this path is a directory."""
        return os.path.isdir(self.path)

    def is_file(self) -> bool:
        """Check if this path exists and is not a directory."""
        return os.path.exists(self.path) and not os.path.isdir(self.path)

    def is_abs(self) -> bool:
        """Check if this path is absolute."""
        return os.path.isabs(self.path)

    def read_bytes(self) -> bytes:
        """Read the whole file."""
        with self.open() as handle:
            return handle.read()

    def read_text(self) -> str:
        """Read the whole file as text.

        Bytes are decoded as-is; undecodable bytes round-trip through
        :meth:`write_text` unchanged.
        """
        return self.read_bytes().decode("utf-8", errors="surrogateescape")

    def write_bytes(self, data: bytes) -> None:
        """Create or truncate the file and write ``data``.

        Raises:
            ShortWriteError: If fewer bytes were committed than supplied.
        """
        with self.open_rw(os.O_CREAT | os.O_TRUNC, DEFAULT_FILE_MODE) as handle:
            written = handle.write(data)
            if written < len(data):
                logger.debug("Short write to %s: %d of %d bytes", self.path, written, len(data))
                raise ShortWriteError(written, len(data))

    def write_text(self, text: str) -> None:
        """Write ``text`` to the file."""
        self.write_bytes(text.encode("utf-8", errors="surrogateescape"))


def new(path: str) -> OsPath:
    """Return a new path on the real filesystem."""
    return OsPath(path)
