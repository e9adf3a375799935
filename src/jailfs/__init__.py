"""
jailfs - Path-jailing filesystem proxy

Confines every path a caller sees to a base directory of an underlying
filesystem, translating between a virtual path space rooted at '/' and the
real path space, without revealing the real base path.

Example:
    >>> from jailfs import JailedFileSystem, MemoryFileSystem
    >>> fs = JailedFileSystem(MemoryFileSystem(), "/base/path")
    >>> fs.mkdir_all("/tmp", 0o755)
    >>> fs.create("/tmp/foo").name
    '/tmp/foo'

License: Apache-2.0
"""

__version__ = "0.1.0"

from .base import FileSystem
from .config import JailConfig
from .exceptions import (
    JailConfigurationError,
    JailFsError,
    OperationNotSupportedError,
    PathOutsideBaseError,
)
from .jail import JailedDirEntry, JailedFile, JailedFileSystem, create_jailed_filesystem
from .logging_utils import JailLogFilter, init_jail_logging
from .memfs import MemoryDirEntry, MemoryFile, MemoryFileSystem
from .osfs import OsFileSystem
from .paths import PathPolicy

__all__ = [
    # Version
    "__version__",
    # Interface
    "FileSystem",
    # Jail
    "JailedFileSystem",
    "JailedFile",
    "JailedDirEntry",
    "create_jailed_filesystem",
    "PathPolicy",
    # Implementations
    "OsFileSystem",
    "MemoryFileSystem",
    "MemoryFile",
    "MemoryDirEntry",
    # Configuration
    "JailConfig",
    # Errors
    "JailFsError",
    "JailConfigurationError",
    "PathOutsideBaseError",
    "OperationNotSupportedError",
    # Logging
    "JailLogFilter",
    "init_jail_logging",
]
