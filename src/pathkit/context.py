"""Application context for dependency injection.

This module separates backend selection from path use: callers ask the
context for a path and never branch on which filesystem is underneath.

The filesystem is typed using the FileSystem Protocol rather than a
concrete implementation, so any in-memory filesystem or test double can
be injected.
"""

from __future__ import annotations

from dataclasses import dataclass

from pathkit.ospath import OsPath
from pathkit.protocols import FileSystem, Path
from pathkit.virtual import VirtualPath


@dataclass
class PathContext:
    """Container for the filesystem backing every path handed out.

    With no filesystem the context produces OsPath values; otherwise it
    produces VirtualPath values sharing the injected filesystem.
    """

    filesystem: FileSystem | None = None

    @property
    def is_virtual(self) -> bool:
        """True when paths are backed by an injected filesystem."""
        return self.filesystem is not None

    def path(self, value: str) -> Path:
        """Build a path on this context's backend.

        Args:
            value: Path string, absolute or relative.

        Returns:
            A Path bound to the configured backend.
        """
        if self.filesystem is None:
            return OsPath(value)
        return VirtualPath(self.filesystem, value)


def create_context(
    virtual: bool = False,
    filesystem: FileSystem | None = None,
) -> PathContext:
    """Factory for path contexts.

    Use this in production code. For tests, construct PathContext
    directly with a test double.

    Args:
        virtual: Back paths with a fresh MemoryFileSystem.
        filesystem: Explicit filesystem to inject (takes precedence).

    Returns:
        Configured PathContext.
    """
    if filesystem is None and virtual:
        from pathkit.filesystem import MemoryFileSystem

        filesystem = MemoryFileSystem()
    return PathContext(filesystem=filesystem)
