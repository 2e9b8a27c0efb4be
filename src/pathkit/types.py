"""Shared data types and defaults for pathkit."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from pathkit.protocols import Path

__all__ = [
    "ACCESS_MODE_MASK",
    "DEFAULT_DIR_MODE",
    "DEFAULT_FILE_MODE",
    "VIRTUAL_ROOT",
    "FileInfo",
    "PathInfo",
]

# Mode for newly created files, before umask
DEFAULT_FILE_MODE = 0o666

# Mode for newly created directories, before umask
DEFAULT_DIR_MODE = 0o777

# Working directory of every virtual filesystem
VIRTUAL_ROOT = "/"

# Bits of an os.open flag word that select read, write or read-write access
ACCESS_MODE_MASK = os.O_RDONLY | os.O_WRONLY | os.O_RDWR


@dataclass(frozen=True)
class FileInfo:
    """Result of a stat call, shared by every filesystem capability.

    Attributes:
        name: Base name of the entry.
        size: Size in bytes (0 for directories in memory).
        mode: Full mode including the file type bits, as in ``st_mode``.
        mtime: Modification time in seconds since the epoch.
    """

    name: str
    size: int
    mode: int
    mtime: float = 0.0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.size < 0:
            raise ValueError("size cannot be negative")

    @classmethod
    def from_stat(cls, name: str, result: os.stat_result) -> FileInfo:
        """Build from an ``os.stat`` result."""
        return cls(
            name=name,
            size=result.st_size,
            mode=result.st_mode,
            mtime=result.st_mtime,
        )

    def is_dir(self) -> bool:
        """Check if the entry is a directory."""
        return stat.S_ISDIR(self.mode)

    @property
    def permissions(self) -> int:
        """Permission bits without the file type."""
        return stat.S_IMODE(self.mode)


class PathInfo(BaseModel):
    """Summary of a path, as reported by the CLI."""

    path: str
    absolute: str
    parent: str
    exists: bool
    is_dir: bool
    is_file: bool
    is_abs: bool

    @classmethod
    def from_path(cls, path: Path) -> PathInfo:
        """Summarize a path on any backend.

        Raises:
            ResolutionError: If the absolute form cannot be computed.
        """
        return cls(
            path=path.string(),
            absolute=path.absolute().string(),
            parent=path.parent().string(),
            exists=path.exists(),
            is_dir=path.is_dir(),
            is_file=path.is_file(),
            is_abs=path.is_abs(),
        )
