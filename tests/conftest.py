"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path as LocalPath
from typing import Any
from unittest.mock import MagicMock

import pytest

from pathkit.filesystem import MemoryFileSystem
from pathkit.ospath import OsPath
from pathkit.protocols import Path
from pathkit.virtual import VirtualPath


@pytest.fixture
def memfs() -> MemoryFileSystem:
    """Create an empty in-memory filesystem."""
    return MemoryFileSystem()


@pytest.fixture(params=["os", "virtual"])
def root(request: pytest.FixtureRequest, tmp_path: LocalPath) -> Path:
    """Create an empty working directory on each backend."""
    if request.param == "os":
        return OsPath(str(tmp_path))
    fs = MemoryFileSystem()
    fs.mkdir_all("/work", 0o777)
    return VirtualPath(fs, "/work")


# ============================================================================
# Test Doubles
# ============================================================================


class HalfWriteFile:
    """Handle wrapper that commits only half of every write."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def write(self, data: bytes) -> int:
        return self.inner.write(data[: len(data) // 2])

    def __getattr__(self, name: str) -> Any:
        return getattr(self.inner, name)

    def __enter__(self) -> HalfWriteFile:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.inner.close()


class TruncatingFileSystem(MemoryFileSystem):
    """MemoryFileSystem whose writable handles drop half of each write."""

    def __init__(self) -> None:
        super().__init__()
        self.handles: list[HalfWriteFile] = []

    def open_file(self, name: str, flags: int, mode: int) -> Any:
        handle = HalfWriteFile(super().open_file(name, flags, mode))
        self.handles.append(handle)
        return handle


@pytest.fixture
def truncating_fs() -> TruncatingFileSystem:
    """Create a filesystem that reports short writes."""
    return TruncatingFileSystem()


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock records every primitive call without touching any files.
    """
    fs = MagicMock()
    handle = MagicMock()
    handle.__enter__.return_value = handle
    handle.read.return_value = b""
    fs.open.return_value = handle
    fs.open_file.return_value = handle
    fs.create.return_value = handle
    return fs
