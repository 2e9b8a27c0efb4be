"""Filesystem capabilities for virtual paths.

This module provides the concrete filesystems a
:class:`pathkit.virtual.VirtualPath` can be injected with. The
OsFileSystem implementation wraps standard library ``os`` operations;
MemoryFileSystem keeps a directory tree in memory for tests that must
not touch disk.
"""

from __future__ import annotations

import errno
import io
import logging
import os
import posixpath
import stat
import threading
import time
from dataclasses import dataclass, field
from types import TracebackType

from pathkit.types import ACCESS_MODE_MASK, DEFAULT_FILE_MODE, VIRTUAL_ROOT, FileInfo

__all__ = ["MemoryFile", "MemoryFileSystem", "OsFile", "OsFileSystem"]

logger = logging.getLogger(__name__)


def _os_error(cls: type[OSError], code: int, name: str) -> OSError:
    """Build an OSError the way the operating system reports it."""
    return cls(code, os.strerror(code), name)


class OsFile:
    """Handle on a file opened through the operating system.

    Satisfies the ReadWriteFile protocol structurally. Writes are
    unbuffered so the returned count is what the kernel accepted.
    """

    def __init__(self, fd: int, name: str, writable: bool) -> None:
        """Wrap an open descriptor.

        Args:
            fd: Descriptor returned by ``os.open``. Ownership passes to the handle.
            name: Path the descriptor was opened from.
            writable: Whether the descriptor allows writing.
        """
        self.name = name
        self._raw = io.FileIO(fd, "r+" if writable else "r", closefd=True)

    def read(self, size: int = -1) -> bytes:
        data = self._raw.read(size)
        return data if data is not None else b""

    def pread(self, size: int, offset: int) -> bytes:
        return os.pread(self._raw.fileno(), size, offset)

    def write(self, data: bytes) -> int:
        written = self._raw.write(data)
        return written if written is not None else 0

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def fileno(self) -> int:
        return self._raw.fileno()

    def close(self) -> None:
        self._raw.close()

    @property
    def closed(self) -> bool:
        return self._raw.closed

    def __enter__(self) -> OsFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_os_file(name: str, flags: int, mode: int = DEFAULT_FILE_MODE) -> OsFile:
    """Open ``name`` with ``os.open`` and wrap the descriptor.

    Args:
        name: Path to open.
        flags: Combination of ``os.O_*`` flags.
        mode: Permission bits used when the file is created.

    Returns:
        OsFile owning the new descriptor.
    """
    flags |= getattr(os, "O_BINARY", 0)
    fd = os.open(name, flags, mode)
    try:
        return OsFile(fd, name, writable=(flags & ACCESS_MODE_MASK) != os.O_RDONLY)
    except BaseException:
        os.close(fd)
        raise


class OsFileSystem:
    """Production filesystem implementation.

    Wraps standard library ``os`` operations.
    Satisfies the FileSystem protocol structurally.
    """

    def create(self, name: str) -> OsFile:
        """Create or truncate a file."""
        return open_os_file(name, os.O_RDWR | os.O_CREAT | os.O_TRUNC)

    def open(self, name: str) -> OsFile:
        """Open a file for reading."""
        return open_os_file(name, os.O_RDONLY)

    def open_file(self, name: str, flags: int, mode: int) -> OsFile:
        """Open a file with ``os.O_*`` flags."""
        return open_os_file(name, flags, mode)

    def remove(self, name: str) -> None:
        """Remove a file or an empty directory."""
        if os.path.isdir(name) and not os.path.islink(name):
            os.rmdir(name)
        else:
            os.unlink(name)

    def mkdir(self, name: str, mode: int) -> None:
        """Create a directory."""
        os.mkdir(name, mode)

    def mkdir_all(self, name: str, mode: int) -> None:
        """Create a directory and its missing ancestors."""
        os.makedirs(name, mode, exist_ok=True)

    def chmod(self, name: str, mode: int) -> None:
        """Change permission bits."""
        os.chmod(name, mode)

    def rename(self, old: str, new: str) -> None:
        """Move an entry."""
        os.rename(old, new)

    def stat(self, name: str) -> FileInfo:
        """Describe an entry."""
        return FileInfo.from_stat(os.path.basename(name), os.stat(name))


@dataclass
class _Node:
    """Entry in the in-memory tree."""

    name: str
    mode: int
    data: bytearray = field(default_factory=bytearray)
    children: dict[str, _Node] | None = None
    mtime: float = field(default_factory=time.time)

    @property
    def is_dir(self) -> bool:
        return self.children is not None

    def info(self) -> FileInfo:
        kind = stat.S_IFDIR if self.is_dir else stat.S_IFREG
        return FileInfo(
            name=self.name,
            size=0 if self.is_dir else len(self.data),
            mode=kind | self.mode,
            mtime=self.mtime,
        )


class MemoryFile:
    """Handle on a file stored in a MemoryFileSystem.

    Mirrors the behavior of an unbuffered OS file: reading a write-only
    handle or writing a read-only one raises ``io.UnsupportedOperation``,
    and any use after close raises ``ValueError``.
    """

    def __init__(
        self,
        node: _Node,
        name: str,
        lock: threading.RLock,
        readable: bool,
        writable: bool,
        append: bool = False,
    ) -> None:
        self.name = name
        self._node = node
        self._lock = lock
        self._readable = readable
        self._writable = writable
        self._append = append
        self._pos = 0
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("I/O operation on closed file.")

    def _check_readable(self) -> None:
        self._check_open()
        if not self._readable:
            raise io.UnsupportedOperation("File not open for reading")

    def read(self, size: int = -1) -> bytes:
        self._check_readable()
        with self._lock:
            data = self._node.data
            end = len(data) if size < 0 else min(len(data), self._pos + size)
            chunk = bytes(data[self._pos:end])
            self._pos = max(self._pos, end)
        return chunk

    def pread(self, size: int, offset: int) -> bytes:
        self._check_readable()
        if size < 0 or offset < 0:
            raise _os_error(OSError, errno.EINVAL, self.name)
        with self._lock:
            return bytes(self._node.data[offset:offset + size])

    def write(self, data: bytes) -> int:
        self._check_open()
        if not self._writable:
            raise io.UnsupportedOperation("File not open for writing")
        with self._lock:
            buf = self._node.data
            if self._append:
                self._pos = len(buf)
            if self._pos > len(buf):
                buf.extend(b"\x00" * (self._pos - len(buf)))
            buf[self._pos:self._pos + len(data)] = data
            self._pos += len(data)
            self._node.mtime = time.time()
        return len(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        self._check_open()
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._pos + offset
        elif whence == os.SEEK_END:
            with self._lock:
                target = len(self._node.data) + offset
        else:
            raise ValueError(f"invalid whence ({whence})")
        if target < 0:
            raise _os_error(OSError, errno.EINVAL, self.name)
        self._pos = target
        return target

    def tell(self) -> int:
        self._check_open()
        return self._pos

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> MemoryFile:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class MemoryFileSystem:
    """In-memory filesystem rooted at ``/``.

    Satisfies the FileSystem protocol structurally. Relative names are
    resolved against the root. Errors are the OSError subclasses the
    operating system would raise for the same call. Every operation holds
    a single re-entrant lock, so one instance can be shared across threads.
    """

    def __init__(self) -> None:
        """Initialize an empty tree containing only the root directory."""
        self._lock = threading.RLock()
        self._root = _Node(name=VIRTUAL_ROOT, mode=0o755, children={})

    @staticmethod
    def _parts(name: str) -> list[str]:
        """Split a name into components below the root."""
        clean = posixpath.normpath(posixpath.join(VIRTUAL_ROOT, name))
        return [part for part in clean.split("/") if part]

    def _lookup(self, name: str) -> _Node:
        node = self._root
        for part in self._parts(name):
            if not node.is_dir:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, name)
            child = node.children.get(part)
            if child is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, name)
            node = child
        return node

    def _lookup_parent(self, name: str) -> tuple[_Node, str]:
        """Return the directory that holds ``name`` and the final component."""
        parts = self._parts(name)
        if not parts:
            raise _os_error(PermissionError, errno.EPERM, name)
        parent = self._lookup(posixpath.join(VIRTUAL_ROOT, *parts[:-1]))
        if not parent.is_dir:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, name)
        return parent, parts[-1]

    def create(self, name: str) -> MemoryFile:
        """Create or truncate a file."""
        return self.open_file(name, os.O_RDWR | os.O_CREAT | os.O_TRUNC, DEFAULT_FILE_MODE)

    def open(self, name: str) -> MemoryFile:
        """Open a file for reading."""
        return self.open_file(name, os.O_RDONLY, 0)

    def open_file(self, name: str, flags: int, mode: int) -> MemoryFile:
        """Open a file with ``os.O_*`` flags."""
        access = flags & ACCESS_MODE_MASK
        readable = access in (os.O_RDONLY, os.O_RDWR)
        writable = access in (os.O_WRONLY, os.O_RDWR)
        with self._lock:
            parent, base = self._lookup_parent(name)
            node = parent.children.get(base)
            if node is None:
                if not flags & os.O_CREAT:
                    raise _os_error(FileNotFoundError, errno.ENOENT, name)
                node = _Node(name=base, mode=mode & 0o7777)
                parent.children[base] = node
            elif flags & os.O_CREAT and flags & os.O_EXCL:
                raise _os_error(FileExistsError, errno.EEXIST, name)
            if node.is_dir:
                raise _os_error(IsADirectoryError, errno.EISDIR, name)
            if flags & os.O_TRUNC and writable:
                node.data.clear()
                node.mtime = time.time()
        return MemoryFile(
            node,
            name,
            self._lock,
            readable=readable,
            writable=writable,
            append=bool(flags & os.O_APPEND),
        )

    def remove(self, name: str) -> None:
        """Remove a file or an empty directory."""
        with self._lock:
            parent, base = self._lookup_parent(name)
            node = parent.children.get(base)
            if node is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, name)
            if node.is_dir and node.children:
                raise _os_error(OSError, errno.ENOTEMPTY, name)
            del parent.children[base]

    def mkdir(self, name: str, mode: int) -> None:
        """Create a directory; the parent must exist."""
        with self._lock:
            if not self._parts(name):
                raise _os_error(FileExistsError, errno.EEXIST, name)
            parent, base = self._lookup_parent(name)
            if base in parent.children:
                raise _os_error(FileExistsError, errno.EEXIST, name)
            parent.children[base] = _Node(name=base, mode=mode & 0o7777, children={})

    def mkdir_all(self, name: str, mode: int) -> None:
        """Create a directory and any missing ancestors."""
        with self._lock:
            node = self._root
            parts = self._parts(name)
            for index, part in enumerate(parts, 1):
                child = node.children.get(part)
                if child is None:
                    child = _Node(name=part, mode=mode & 0o7777, children={})
                    node.children[part] = child
                    logger.debug("Created directory %s under %s", part, node.name)
                elif not child.is_dir:
                    if index == len(parts):
                        raise _os_error(FileExistsError, errno.EEXIST, name)
                    raise _os_error(NotADirectoryError, errno.ENOTDIR, name)
                node = child

    def chmod(self, name: str, mode: int) -> None:
        """Change permission bits."""
        with self._lock:
            node = self._lookup(name)
            node.mode = mode & 0o7777

    def rename(self, old: str, new: str) -> None:
        """Move an entry, replacing a compatible destination."""
        with self._lock:
            src_parent, src_base = self._lookup_parent(old)
            node = src_parent.children.get(src_base)
            if node is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, old)
            old_parts = self._parts(old)
            new_parts = self._parts(new)
            if old_parts == new_parts:
                return
            if node.is_dir and new_parts[: len(old_parts)] == old_parts:
                raise _os_error(OSError, errno.EINVAL, new)
            dst_parent, dst_base = self._lookup_parent(new)
            existing = dst_parent.children.get(dst_base)
            if existing is not None:
                if existing.is_dir and not node.is_dir:
                    raise _os_error(IsADirectoryError, errno.EISDIR, new)
                if node.is_dir and not existing.is_dir:
                    raise _os_error(NotADirectoryError, errno.ENOTDIR, new)
                if existing.is_dir and existing.children:
                    raise _os_error(OSError, errno.ENOTEMPTY, new)
            del src_parent.children[src_base]
            node.name = dst_base
            dst_parent.children[dst_base] = node

    def stat(self, name: str) -> FileInfo:
        """Describe an entry."""
        with self._lock:
            return self._lookup(name).info()
