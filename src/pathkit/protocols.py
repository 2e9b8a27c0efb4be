"""Protocol definitions for paths, open files and filesystem capabilities.

Code written against :class:`Path` runs unchanged over the real operating
system (:class:`pathkit.ospath.OsPath`) or over an injected filesystem
(:class:`pathkit.virtual.VirtualPath`).

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathkit.types import FileInfo


@runtime_checkable
class ReadableFile(Protocol):
    """Protocol for a file opened for reading.

    Handles are owned by the caller that opened them and must be closed,
    preferably with a ``with`` block. Closing twice is a no-op.
    """

    name: str

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, or everything left when negative."""
        ...

    def pread(self, size: int, offset: int) -> bytes:
        """Read ``size`` bytes at ``offset`` without moving the position."""
        ...

    def seek(self, offset: int, whence: int = 0) -> int:
        """Move the position and return the new absolute offset."""
        ...

    def tell(self) -> int:
        """Return the current position."""
        ...

    def close(self) -> None:
        """Release the handle."""
        ...

    @property
    def closed(self) -> bool:
        """True once the handle has been released."""
        ...

    def __enter__(self) -> ReadableFile: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class ReadWriteFile(ReadableFile, Protocol):
    """Protocol for a file opened for reading and writing."""

    def write(self, data: bytes) -> int:
        """Write ``data`` and return the number of bytes committed."""
        ...

    def __enter__(self) -> ReadWriteFile: ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for the primitives a virtual path is built on.

    Any in-memory filesystem or test double exposing these methods can back
    a :class:`pathkit.virtual.VirtualPath`. Failures are reported with the
    same ``OSError`` subclasses the operating system would raise.
    """

    def create(self, name: str) -> ReadWriteFile:
        """Create or truncate a file and open it for reading and writing.

        Args:
            name: Path of the file.

        Returns:
            Open handle positioned at offset 0.
        """
        ...

    def open(self, name: str) -> ReadableFile:
        """Open a file for reading.

        Args:
            name: Path of the file.

        Returns:
            Read-only handle.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    def open_file(self, name: str, flags: int, mode: int) -> ReadWriteFile:
        """Open a file with ``os.O_*`` flags.

        Args:
            name: Path of the file.
            flags: Combination of ``os.O_*`` flags.
            mode: Permission bits used when the file is created.

        Returns:
            Open handle.
        """
        ...

    def remove(self, name: str) -> None:
        """Remove a file or an empty directory.

        Args:
            name: Path to remove.
        """
        ...

    def mkdir(self, name: str, mode: int) -> None:
        """Create a single directory; the parent must exist.

        Args:
            name: Path to create.
            mode: Permission bits.
        """
        ...

    def mkdir_all(self, name: str, mode: int) -> None:
        """Create a directory and any missing ancestors.

        Existing directories along the way are not an error.

        Args:
            name: Path to create.
            mode: Permission bits for every created directory.
        """
        ...

    def chmod(self, name: str, mode: int) -> None:
        """Change permission bits.

        Args:
            name: Path to change.
            mode: New permission bits.
        """
        ...

    def rename(self, old: str, new: str) -> None:
        """Move an entry to a new path.

        Args:
            old: Current path.
            new: Destination path.
        """
        ...

    def stat(self, name: str) -> FileInfo:
        """Describe an entry.

        Args:
            name: Path to describe.

        Returns:
            FileInfo for the entry.

        Raises:
            FileNotFoundError: If the entry does not exist.
        """
        ...


@runtime_checkable
class Path(Protocol):
    """Protocol for a filesystem path value.

    Path values are immutable: operations that compute another location
    return a new value of the same backend. Predicates never raise.
    """

    path: str

    # Path operations

    def absolute(self) -> Path:
        """Return an absolute form of this path.

        Raises:
            ResolutionError: If the working directory cannot be determined.
        """
        ...

    def cwd(self) -> Path:
        """Return the working directory of this path's backend.

        Raises:
            ResolutionError: If the working directory cannot be determined.
        """
        ...

    def parent(self) -> Path:
        """Return the directory containing the absolute form of this path.

        Raises:
            ResolutionError: If the absolute form cannot be computed.
        """
        ...

    def join_path(self, *segments: str) -> Path:
        """Return this path extended with ``segments``, normalized."""
        ...

    def string(self) -> str:
        """Return the stored path string verbatim."""
        ...

    # File and directory operations

    def touch(self) -> None:
        """Create the file, truncating it if it already exists."""
        ...

    def unlink(self) -> None:
        """Remove this file or link."""
        ...

    def rmdir(self) -> None:
        """Remove this directory, which must be empty."""
        ...

    def mkdir(self, mode: int = ..., parents: bool = False) -> None:
        """Create a directory at this path.

        Args:
            mode: Permission bits.
            parents: Create missing ancestors and accept existing ones.
        """
        ...

    def open(self) -> ReadableFile:
        """Open this file for reading."""
        ...

    def open_rw(self, flags: int = 0, mode: int = ...) -> ReadWriteFile:
        """Open this file for reading and writing.

        Args:
            flags: Extra ``os.O_*`` flags such as ``O_CREAT`` or ``O_APPEND``.
            mode: Permission bits used when the file is created.
        """
        ...

    def chmod(self, mode: int) -> None:
        """Change the permission bits of this path."""
        ...

    def rename(self, target: Path) -> None:
        """Move this path to ``target``.

        Raises:
            PathError: If ``target`` belongs to an incompatible backend.
        """
        ...

    def exists(self) -> bool:
        """Check if this path exists."""
        ...

    # Path testing

    def is_dir(self) -> bool:
        """Check if this path is a directory."""
        ...

    def is_file(self) -> bool:
        """Check if this path exists and is not a directory."""
        ...

    def is_abs(self) -> bool:
        """Check if this path is absolute."""
        ...

    # File operations

    def read_bytes(self) -> bytes:
        """Read the whole file."""
        ...

    def read_text(self) -> str:
        """Read the whole file as text, without charset conversion."""
        ...

    def write_bytes(self, data: bytes) -> None:
        """Create or truncate the file and write ``data``.

        Raises:
            ShortWriteError: If fewer bytes were committed than supplied.
        """
        ...

    def write_text(self, text: str) -> None:
        """Write ``text`` through :meth:`write_bytes`."""
        ...
