"""
Abstract filesystem interface.

Every filesystem in this package (the native one, the in-memory one and the
jailed proxy) implements ``FileSystem``, so a jail can wrap any of them,
including another jail.
"""

import os
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from .exceptions import OperationNotSupportedError


class FileSystem(ABC):
    """
    Abstract base class for filesystem implementations.

    Paths are plain strings in the implementation's own namespace. Returned
    file handles follow Python's binary file-object protocol and returned
    directory entries follow the ``os.DirEntry`` shape (``name``, ``path``,
    ``is_dir()``, ``is_file()``, ``is_symlink()``, ``stat()``). Failures are
    reported with the built-in ``OSError`` family.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of this filesystem implementation."""
        pass

    def create(self, path: str) -> Any:
        """
        Create or truncate a file and open it for reading and writing.

        Args:
            path: File path

        Returns:
            Open file handle
        """
        return self.open_file(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, 0o666)

    def open(self, path: str) -> Any:
        """Open a file for reading."""
        return self.open_file(path, os.O_RDONLY, 0)

    @abstractmethod
    def open_file(self, path: str, flags: int, perm: int) -> Any:
        """
        Open a file with explicit ``os.O_*`` flags.

        Args:
            path: File path
            flags: Bitwise OR of ``os.O_*`` flags
            perm: Permission bits used when the file is created

        Returns:
            Open file handle
        """
        pass

    @abstractmethod
    def mkdir(self, path: str, perm: int) -> None:
        pass

    @abstractmethod
    def mkdir_all(self, path: str, perm: int) -> None:
        """Create a directory and any missing parents; existing ones are kept."""
        pass

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or an empty directory."""
        pass

    @abstractmethod
    def remove_all(self, path: str) -> None:
        """Remove a path and everything below it. A missing path is not an error."""
        pass

    @abstractmethod
    def rename(self, old: str, new: str) -> None:
        pass

    @abstractmethod
    def stat(self, path: str) -> os.stat_result:
        pass

    def lstat_if_possible(self, path: str) -> Tuple[os.stat_result, bool]:
        """
        Stat a path without following a final symlink, when supported.

        Returns:
            Tuple of (stat result, True if lstat was used)
        """
        return self.stat(path), False

    @abstractmethod
    def read_dir(self, path: str) -> List[Any]:
        """List a directory. Entries are sorted by name."""
        pass

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        pass

    @abstractmethod
    def chtimes(self, path: str, atime: float, mtime: float) -> None:
        """Change access and modification times (seconds since the epoch)."""
        pass

    @abstractmethod
    def chown(self, path: str, uid: int, gid: int) -> None:
        """Change ownership; ``-1`` leaves a value unchanged."""
        pass

    def symlink(self, old: str, new: str) -> None:
        """Create ``new`` as a symbolic link pointing at ``old``."""
        raise OperationNotSupportedError("symlink", self.name)

    def readlink(self, path: str) -> str:
        """Return the target of a symbolic link."""
        raise OperationNotSupportedError("readlink", self.name)

    def __repr__(self) -> str:
        return f"<{self.name}>"
