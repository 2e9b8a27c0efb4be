"""Paths on an injected filesystem.

A VirtualPath performs every operation through a FileSystem capability,
so tests can swap the disk for a MemoryFileSystem or any other double.
Two behaviors differ from OsPath and are relied on by tests:

- ``unlink`` and ``rmdir`` both call ``remove``, so ``unlink`` also
  removes an empty directory.
- ``cwd`` is always the virtual root ``/``.
"""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass, field

from pathkit.errors import PathError, ShortWriteError, log_failure
from pathkit.protocols import FileSystem, Path, ReadableFile, ReadWriteFile
from pathkit.types import ACCESS_MODE_MASK, DEFAULT_DIR_MODE, DEFAULT_FILE_MODE, VIRTUAL_ROOT

__all__ = ["VirtualPath", "new_virtual"]

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    """Normalize a virtual path; any run of leading slashes is the root."""
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        return VIRTUAL_ROOT + cleaned.lstrip("/")
    return cleaned


@dataclass(frozen=True)
class VirtualPath:
    """A path on an injected filesystem.

    Satisfies the Path protocol structurally. Derived paths share the
    same filesystem instance.

    Attributes:
        fs: Filesystem every operation is delegated to.
        path: The path string, absolute or relative, as given.
    """

    fs: FileSystem = field(repr=False)
    path: str

    def __str__(self) -> str:
        return self.path

    def _with(self, path: str) -> VirtualPath:
        return VirtualPath(self.fs, path)

    def string(self) -> str:
        """Return the stored path string verbatim."""
        return self.path

    def absolute(self) -> VirtualPath:
        """Return the path joined onto the virtual working directory."""
        cwd = self.cwd()
        return self._with(_normalize(posixpath.join(cwd.path, self.path)))

    def cwd(self) -> VirtualPath:
        """Return the virtual root."""
        return self._with(VIRTUAL_ROOT)

    def parent(self) -> VirtualPath:
        """Return the parent of the absolute form of this path."""
        return self._with(posixpath.dirname(self.absolute().path))

    def join_path(self, *segments: str) -> VirtualPath:
        """Combine this path with one or several segments."""
        return self._with(_normalize(posixpath.join(self.path, *segments)))

    def touch(self) -> None:
        """Create the file, truncating it if present."""
        with log_failure(logger, "touch", self.path):
            handle = self.fs.create(self.path)
        handle.close()

    def unlink(self) -> None:
        """Remove this entry, file or empty directory."""
        with log_failure(logger, "remove", self.path):
            self.fs.remove(self.path)

    def rmdir(self) -> None:
        """Remove this entry; same primitive as :meth:`unlink`."""
        self.unlink()

    def mkdir(self, mode: int = DEFAULT_DIR_MODE, parents: bool = False) -> None:
        """Create a directory at this path.

        Args:
            mode: Permission bits.
            parents: Create missing ancestors; existing directories are accepted.
        """
        with log_failure(logger, "mkdir", self.path):
            if parents:
                self.fs.mkdir_all(self.path, mode)
            else:
                self.fs.mkdir(self.path, mode)

    def open(self) -> ReadableFile:
        """Open this file for reading."""
        with log_failure(logger, "open", self.path):
            return self.fs.open(self.path)

    def open_rw(self, flags: int = 0, mode: int = DEFAULT_FILE_MODE) -> ReadWriteFile:
        """Open this file for reading and writing.

        Any access mode in ``flags`` is replaced by ``O_RDWR``.
        """
        with log_failure(logger, "open_rw", self.path):
            return self.fs.open_file(self.path, (flags & ~ACCESS_MODE_MASK) | os.O_RDWR, mode)

    def chmod(self, mode: int) -> None:
        """Change the permission bits of this path."""
        with log_failure(logger, "chmod", self.path):
            self.fs.chmod(self.path, mode)

    def rename(self, target: Path) -> None:
        """Move this path to ``target`` on the same filesystem.

        Raises:
            PathError: If ``target`` is not a VirtualPath on this filesystem.
        """
        if not isinstance(target, VirtualPath) or target.fs is not self.fs:
            logger.debug("Refusing rename of %s to %r", self.path, target)
            raise PathError(f"cannot rename {self.path} outside its filesystem")
        with log_failure(logger, "rename", self.path):
            self.fs.rename(self.path, target.path)

    def exists(self) -> bool:
        """Check if this path exists."""
        try:
            self.fs.stat(self.path)
        except FileExistsError:
            return True
        except (OSError, ValueError):
            return False
        return True

    def is_dir(self) -> bool:
        """Check if this path is a directory."""
        try:
            return self.fs.stat(self.path).is_dir()
        except (OSError, ValueError):
            return False

    def is_file(self) -> bool:
        """Check if this path exists and is not a directory."""
        try:
            return not self.fs.stat(self.path).is_dir()
        except (OSError, ValueError):
            return False

    def is_abs(self) -> bool:
        """Check if this path is absolute."""
        return posixpath.isabs(self.path)

    def read_bytes(self) -> bytes:
        """Read the whole file."""
        with self.open() as handle:
            return handle.read()

    def read_text(self) -> str:
        """Read the whole file as text, without charset conversion."""
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


def new_virtual(fs: FileSystem, path: str) -> VirtualPath:
    """Return a new path on ``fs``."""
    return VirtualPath(fs, path)
