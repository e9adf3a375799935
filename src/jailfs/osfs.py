"""Native filesystem backed by the ``os`` module."""

import os
import shutil
from typing import Any, List, Tuple

from .base import FileSystem


def _mode_from_flags(flags: int) -> str:
    """Map ``os.O_*`` access flags to a binary ``open()`` mode string."""
    access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
    append = bool(flags & os.O_APPEND)

    if access == os.O_WRONLY:
        return "ab" if append else "wb"
    if access == os.O_RDWR:
        return "a+b" if append else "r+b"
    return "rb"


class OsFileSystem(FileSystem):
    """
    Filesystem that forwards every call to the operating system.

    Handles are regular Python binary file objects whose ``name`` is the path
    that was passed in.
    """

    @property
    def name(self) -> str:
        return "OsFileSystem"

    def open_file(self, path: str, flags: int, perm: int) -> Any:
        # open() derives its own flags from the mode; the opener applies ours
        def opener(file: str, _flags: int) -> int:
            return os.open(file, flags, perm)

        return open(path, _mode_from_flags(flags), opener=opener)

    def mkdir(self, path: str, perm: int) -> None:
        os.mkdir(path, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        os.makedirs(path, perm, exist_ok=True)

    def remove(self, path: str) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            os.rmdir(path)
        else:
            os.remove(path)

    def remove_all(self, path: str) -> None:
        if not os.path.lexists(path):
            return
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)

    def rename(self, old: str, new: str) -> None:
        os.rename(old, new)

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def lstat_if_possible(self, path: str) -> Tuple[os.stat_result, bool]:
        return os.lstat(path), True

    def read_dir(self, path: str) -> List[os.DirEntry]:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def chtimes(self, path: str, atime: float, mtime: float) -> None:
        os.utime(path, (atime, mtime))

    def chown(self, path: str, uid: int, gid: int) -> None:
        os.chown(path, uid, gid)

    def symlink(self, old: str, new: str) -> None:
        os.symlink(old, new)

    def readlink(self, path: str) -> str:
        return os.readlink(path)
