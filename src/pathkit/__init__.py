"""Path objects over the real filesystem or an injected virtual one."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from pathkit.errors import PathError, ResolutionError, ShortWriteError
from pathkit.filesystem import MemoryFileSystem, OsFileSystem
from pathkit.ospath import OsPath, new
from pathkit.protocols import FileSystem, Path, ReadableFile, ReadWriteFile
from pathkit.virtual import VirtualPath, new_virtual

__all__ = [
    "__version__",
    "FileSystem",
    "MemoryFileSystem",
    "OsFileSystem",
    "OsPath",
    "Path",
    "PathError",
    "ReadableFile",
    "ReadWriteFile",
    "ResolutionError",
    "ShortWriteError",
    "VirtualPath",
    "new",
    "new_virtual",
]
