"""Tests for filesystem capabilities."""

from __future__ import annotations

import errno
import io
import os
import stat
import threading
from pathlib import Path as LocalPath

import pytest

from pathkit.filesystem import MemoryFile, MemoryFileSystem, OsFile, OsFileSystem
from pathkit.protocols import FileSystem
from pathkit.types import FileInfo


class TestOsFileSystem:
    """Tests for OsFileSystem implementation."""

    def test_satisfies_protocol(self) -> None:
        """Test OsFileSystem satisfies the FileSystem protocol."""
        assert isinstance(OsFileSystem(), FileSystem)

    def test_create_and_open(self, tmp_path: LocalPath) -> None:
        """Test create writes a file that open can read."""
        fs = OsFileSystem()
        name = str(tmp_path / "file.txt")

        with fs.create(name) as handle:
            handle.write(b"Hello, World!")
        with fs.open(name) as handle:
            assert isinstance(handle, OsFile)
            assert handle.read() == b"Hello, World!"

    def test_open_not_found(self, tmp_path: LocalPath) -> None:
        """Test opening a non-existent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            OsFileSystem().open(str(tmp_path / "missing.txt"))

    def test_open_file_flags(self, tmp_path: LocalPath) -> None:
        """Test open_file honors O_CREAT and the mode."""
        fs = OsFileSystem()
        name = str(tmp_path / "new.txt")

        with fs.open_file(name, os.O_RDWR | os.O_CREAT, 0o600) as handle:
            handle.write(b"x")

        assert stat.S_IMODE(os.stat(name).st_mode) == 0o600

    def test_remove_file(self, tmp_path: LocalPath) -> None:
        """Test remove deletes a file."""
        test_file = tmp_path / "to_delete.txt"
        test_file.touch()

        OsFileSystem().remove(str(test_file))

        assert not test_file.exists()

    def test_remove_empty_directory(self, tmp_path: LocalPath) -> None:
        """Test remove deletes an empty directory like the memory filesystem."""
        test_dir = tmp_path / "empty"
        test_dir.mkdir()

        OsFileSystem().remove(str(test_dir))

        assert not test_dir.exists()

    def test_remove_missing_raises(self, tmp_path: LocalPath) -> None:
        """Test removing a non-existent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            OsFileSystem().remove(str(tmp_path / "missing.txt"))

    def test_mkdir_and_mkdir_all(self, tmp_path: LocalPath) -> None:
        """Test single and recursive directory creation."""
        fs = OsFileSystem()
        fs.mkdir(str(tmp_path / "one"), 0o755)
        fs.mkdir_all(str(tmp_path / "a" / "b" / "c"), 0o755)
        fs.mkdir_all(str(tmp_path / "a" / "b" / "c"), 0o755)

        assert (tmp_path / "one").is_dir()
        assert (tmp_path / "a" / "b" / "c").is_dir()

    def test_chmod_rename_stat(self, tmp_path: LocalPath) -> None:
        """Test chmod, rename and stat delegate to the OS."""
        fs = OsFileSystem()
        src = tmp_path / "src.txt"
        src.write_text("content")
        dst = str(tmp_path / "dst.txt")

        fs.chmod(str(src), 0o640)
        fs.rename(str(src), dst)
        info = fs.stat(dst)

        assert not src.exists()
        assert info.name == "dst.txt"
        assert info.size == 7
        assert info.permissions == 0o640
        assert info.is_dir() is False

    def test_stat_directory(self, tmp_path: LocalPath) -> None:
        """Test stat reports directories."""
        assert OsFileSystem().stat(str(tmp_path)).is_dir() is True


class TestOsFile:
    """Tests for OsFile handles."""

    def test_positional_read(self, tmp_path: LocalPath) -> None:
        """Test pread leaves the position alone."""
        name = tmp_path / "data.bin"
        name.write_bytes(b"abcdef")

        with OsFileSystem().open(str(name)) as handle:
            assert handle.pread(2, 3) == b"de"
            assert handle.tell() == 0

    def test_pread_negative_size(self, tmp_path: LocalPath) -> None:
        """Test pread rejects a negative size."""
        name = tmp_path / "data.bin"
        name.write_bytes(b"abcdef")

        with OsFileSystem().open(str(name)) as handle, pytest.raises(OSError) as exc_info:
            handle.pread(-1, 2)

        assert exc_info.value.errno == errno.EINVAL

    def test_use_after_close(self, tmp_path: LocalPath) -> None:
        """Test reading a closed handle raises ValueError."""
        name = tmp_path / "data.bin"
        name.write_bytes(b"abc")
        handle = OsFileSystem().open(str(name))
        handle.close()

        with pytest.raises(ValueError):
            handle.read()


class TestMemoryFileSystem:
    """Tests for MemoryFileSystem implementation."""

    def test_satisfies_protocol(self, memfs: MemoryFileSystem) -> None:
        """Test MemoryFileSystem satisfies the FileSystem protocol."""
        assert isinstance(memfs, FileSystem)

    def test_root_exists(self, memfs: MemoryFileSystem) -> None:
        """Test the root directory exists from the start."""
        info = memfs.stat("/")
        assert info.is_dir() is True

    def test_create_and_open(self, memfs: MemoryFileSystem) -> None:
        """Test create writes a file that open can read."""
        with memfs.create("/file.txt") as handle:
            assert isinstance(handle, MemoryFile)
            handle.write(b"Hello")

        with memfs.open("/file.txt") as handle:
            assert handle.read() == b"Hello"

    def test_create_truncates(self, memfs: MemoryFileSystem) -> None:
        """Test create empties an existing file."""
        with memfs.create("/file.txt") as handle:
            handle.write(b"old content")

        memfs.create("/file.txt").close()

        assert memfs.stat("/file.txt").size == 0

    def test_open_missing(self, memfs: MemoryFileSystem) -> None:
        """Test opening a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            memfs.open("/missing")

    def test_open_below_file(self, memfs: MemoryFileSystem) -> None:
        """Test a file used as a directory raises NotADirectoryError."""
        memfs.create("/file").close()
        with pytest.raises(NotADirectoryError):
            memfs.open("/file/child")

    def test_open_directory(self, memfs: MemoryFileSystem) -> None:
        """Test a directory cannot be opened as a file."""
        memfs.mkdir("/dir", 0o755)
        with pytest.raises(IsADirectoryError):
            memfs.open("/dir")

    def test_open_file_mode_on_create(self, memfs: MemoryFileSystem) -> None:
        """Test the mode is recorded when O_CREAT creates the file."""
        memfs.open_file("/f", os.O_WRONLY | os.O_CREAT, 0o640).close()
        assert memfs.stat("/f").permissions == 0o640

    def test_read_only_handle_refuses_write(self, memfs: MemoryFileSystem) -> None:
        """Test writing through a read-only handle fails."""
        memfs.create("/f").close()
        with memfs.open("/f") as handle, pytest.raises(io.UnsupportedOperation):
            handle.write(b"x")

    def test_write_only_handle_refuses_read(self, memfs: MemoryFileSystem) -> None:
        """Test reading through a write-only handle fails."""
        with memfs.open_file("/f", os.O_WRONLY | os.O_CREAT, 0o644) as handle:
            with pytest.raises(io.UnsupportedOperation):
                handle.read()

    def test_closed_handle(self, memfs: MemoryFileSystem) -> None:
        """Test any use after close raises ValueError."""
        handle = memfs.create("/f")
        handle.close()
        handle.close()
        assert handle.closed is True
        with pytest.raises(ValueError):
            handle.write(b"x")

    def test_seek_past_end_pads(self, memfs: MemoryFileSystem) -> None:
        """Test writing after seeking past the end fills the gap with zeros."""
        with memfs.create("/f") as handle:
            handle.write(b"ab")
            handle.seek(4)
            handle.write(b"c")
        with memfs.open("/f") as handle:
            assert handle.read() == b"ab\x00\x00c"

    def test_seek_whence(self, memfs: MemoryFileSystem) -> None:
        """Test seek supports all three reference points."""
        with memfs.create("/f") as handle:
            handle.write(b"0123456789")
            assert handle.seek(2) == 2
            assert handle.seek(3, os.SEEK_CUR) == 5
            assert handle.seek(-1, os.SEEK_END) == 9
            with pytest.raises(OSError):
                handle.seek(-20, os.SEEK_END)

    def test_pread_past_end(self, memfs: MemoryFileSystem) -> None:
        """Test pread beyond the data returns what is left."""
        with memfs.create("/f") as handle:
            handle.write(b"abc")
            assert handle.pread(10, 1) == b"bc"
            assert handle.pread(1, 10) == b""

    def test_pread_negative_size(self, memfs: MemoryFileSystem) -> None:
        """Test pread rejects a negative size like an OS file."""
        with memfs.create("/f") as handle:
            handle.write(b"abc")
            with pytest.raises(OSError) as exc_info:
                handle.pread(-1, 2)

        assert exc_info.value.errno == errno.EINVAL

    def test_mkdir_requires_parent(self, memfs: MemoryFileSystem) -> None:
        """Test mkdir fails without the parent directory."""
        with pytest.raises(FileNotFoundError):
            memfs.mkdir("/a/b", 0o755)

    def test_mkdir_existing(self, memfs: MemoryFileSystem) -> None:
        """Test mkdir fails on existing entries, including the root."""
        memfs.mkdir("/a", 0o755)
        with pytest.raises(FileExistsError):
            memfs.mkdir("/a", 0o755)
        with pytest.raises(FileExistsError):
            memfs.mkdir("/", 0o755)

    def test_mkdir_all_below_file(self, memfs: MemoryFileSystem) -> None:
        """Test mkdir_all cannot descend through a file."""
        memfs.create("/file").close()
        with pytest.raises(NotADirectoryError):
            memfs.mkdir_all("/file/sub", 0o755)

    def test_remove_non_empty(self, memfs: MemoryFileSystem) -> None:
        """Test remove refuses a non-empty directory."""
        memfs.mkdir_all("/a/b", 0o755)
        with pytest.raises(OSError):
            memfs.remove("/a")

    def test_remove_root(self, memfs: MemoryFileSystem) -> None:
        """Test the root cannot be removed."""
        with pytest.raises(PermissionError):
            memfs.remove("/")

    def test_rename_into_itself(self, memfs: MemoryFileSystem) -> None:
        """Test a directory cannot be moved below itself."""
        memfs.mkdir("/a", 0o755)
        with pytest.raises(OSError):
            memfs.rename("/a", "/a/b")

    def test_rename_file_over_directory(self, memfs: MemoryFileSystem) -> None:
        """Test a file cannot replace a directory."""
        memfs.create("/f").close()
        memfs.mkdir("/d", 0o755)
        with pytest.raises(IsADirectoryError):
            memfs.rename("/f", "/d")

    def test_rename_directory_over_file(self, memfs: MemoryFileSystem) -> None:
        """Test a directory cannot replace a file."""
        memfs.create("/f").close()
        memfs.mkdir("/d", 0o755)
        with pytest.raises(NotADirectoryError):
            memfs.rename("/d", "/f")

    def test_rename_onto_itself(self, memfs: MemoryFileSystem) -> None:
        """Test renaming onto the same path is a no-op."""
        memfs.create("/f").close()
        memfs.rename("/f", "/f")
        assert memfs.stat("/f").name == "f"

    def test_stat_reports_size_and_type(self, memfs: MemoryFileSystem) -> None:
        """Test stat describes files and directories."""
        with memfs.create("/f") as handle:
            handle.write(b"12345")
        memfs.mkdir("/d", 0o700)

        file_info = memfs.stat("/f")
        dir_info = memfs.stat("/d")

        assert isinstance(file_info, FileInfo)
        assert file_info.size == 5
        assert stat.S_ISREG(file_info.mode)
        assert dir_info.is_dir() is True
        assert dir_info.permissions == 0o700

    def test_concurrent_appends(self, memfs: MemoryFileSystem) -> None:
        """Test appends from several threads all land."""
        memfs.create("/log").close()

        def append() -> None:
            for _ in range(100):
                with memfs.open_file("/log", os.O_WRONLY | os.O_APPEND, 0) as handle:
                    handle.write(b"x")

        threads = [threading.Thread(target=append) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert memfs.stat("/log").size == 400


class TestFileInfo:
    """Tests for the FileInfo type."""

    def test_from_stat(self, tmp_path: LocalPath) -> None:
        """Test conversion from os.stat_result."""
        target = tmp_path / "f"
        target.write_bytes(b"abc")

        info = FileInfo.from_stat("f", os.stat(target))

        assert info.size == 3
        assert info.is_dir() is False

    def test_negative_size_rejected(self) -> None:
        """Test invariant validation."""
        with pytest.raises(ValueError):
            FileInfo(name="x", size=-1, mode=stat.S_IFREG)
