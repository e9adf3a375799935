"""In-memory filesystem.

Paths are normalised to absolute POSIX paths, so ``"C:/data"`` and
``"/C:/data"`` name the same node. The root directory always exists.
"""

from __future__ import annotations

import errno
import io
import os
import posixpath
import stat as stat_module
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .base import FileSystem


def normalize_path(path: str) -> str:
    """Return the canonical absolute form of a memory filesystem path."""
    return posixpath.normpath("/" + path.lstrip("/"))


def _error(cls: type, code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


@dataclass
class _Node:
    """A file or directory stored in memory."""

    is_dir: bool
    mode: int
    ino: int
    data: bytearray = field(default_factory=bytearray)
    uid: int = field(default_factory=lambda: os.getuid() if hasattr(os, "getuid") else 0)
    gid: int = field(default_factory=lambda: os.getgid() if hasattr(os, "getgid") else 0)
    atime: float = field(default_factory=time.time)
    mtime: float = field(default_factory=time.time)
    ctime: float = field(default_factory=time.time)

    def to_stat(self) -> os.stat_result:
        kind = stat_module.S_IFDIR if self.is_dir else stat_module.S_IFREG
        return os.stat_result((
            kind | (self.mode & 0o7777),
            self.ino,
            0,
            2 if self.is_dir else 1,
            self.uid,
            self.gid,
            0 if self.is_dir else len(self.data),
            self.atime,
            self.mtime,
            self.ctime,
        ))


class MemoryFile(io.RawIOBase):
    """
    Open handle on a memory filesystem node.

    All handles on the same node share its byte buffer, so writes are
    immediately visible to other readers.
    """

    def __init__(self, node: _Node, name: str, flags: int, lock: threading.RLock):
        super().__init__()
        self._node = node
        self._lock = lock
        self._pos = 0
        self.name = name

        access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
        self._readable = access in (os.O_RDONLY, os.O_RDWR)
        self._writable = access in (os.O_WRONLY, os.O_RDWR)
        self._append = bool(flags & os.O_APPEND)

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed file.")

    def readable(self) -> bool:
        return self._readable

    def writable(self) -> bool:
        return self._writable

    def seekable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self._ensure_open()
        if not self._readable:
            raise io.UnsupportedOperation("File not open for reading")
        with self._lock:
            chunk = self._node.data[self._pos:self._pos + len(buffer)]
            self._node.atime = time.time()
        count = len(chunk)
        buffer[:count] = chunk
        self._pos += count
        return count

    def write(self, data) -> int:
        self._ensure_open()
        if not self._writable:
            raise io.UnsupportedOperation("File not open for writing")
        payload = bytes(data)
        with self._lock:
            content = self._node.data
            if self._append:
                self._pos = len(content)
            if self._pos > len(content):
                content.extend(b"\0" * (self._pos - len(content)))
            content[self._pos:self._pos + len(payload)] = payload
            self._node.mtime = time.time()
        self._pos += len(payload)
        return len(payload)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._ensure_open()
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._pos + offset
        elif whence == io.SEEK_END:
            with self._lock:
                position = len(self._node.data) + offset
        else:
            raise ValueError(f"invalid whence ({whence}, should be 0, 1 or 2)")
        if position < 0:
            raise _error(OSError, errno.EINVAL, self.name)
        self._pos = position
        return position

    def tell(self) -> int:
        self._ensure_open()
        return self._pos

    def truncate(self, size: Optional[int] = None) -> int:
        self._ensure_open()
        if not self._writable:
            raise io.UnsupportedOperation("File not open for writing")
        if size is None:
            size = self._pos
        with self._lock:
            content = self._node.data
            if size < len(content):
                del content[size:]
            else:
                content.extend(b"\0" * (size - len(content)))
            self._node.mtime = time.time()
        return size

    def __repr__(self) -> str:
        return f"<MemoryFile name={self.name!r}>"


class MemoryDirEntry:
    """Directory entry returned by ``MemoryFileSystem.read_dir``."""

    def __init__(self, fs: "MemoryFileSystem", directory: str, name: str):
        self._fs = fs
        self.name = name
        self.path = posixpath.join(directory, name)

    def is_dir(self, *, follow_symlinks: bool = True) -> bool:
        return stat_module.S_ISDIR(self.stat().st_mode)

    def is_file(self, *, follow_symlinks: bool = True) -> bool:
        return stat_module.S_ISREG(self.stat().st_mode)

    def is_symlink(self) -> bool:
        return False

    def stat(self, *, follow_symlinks: bool = True) -> os.stat_result:
        return self._fs.stat(self.path)

    def inode(self) -> int:
        return self.stat().st_ino

    def __fspath__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"<MemoryDirEntry {self.name!r}>"


class MemoryFileSystem(FileSystem):
    """
    Thread-safe filesystem kept entirely in process memory.

    Example:
        >>> fs = MemoryFileSystem()
        >>> fs.mkdir_all("/base/path/tmp", 0o777)
        >>> with fs.create("/base/path/tmp/foo") as f:
        ...     f.write(b"hello")
        5
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._next_ino = 1
        self._nodes: Dict[str, _Node] = {"/": self._new_node(True, 0o755)}

    @property
    def name(self) -> str:
        return "MemoryFileSystem"

    def _new_node(self, is_dir: bool, perm: int) -> _Node:
        node = _Node(is_dir=is_dir, mode=perm & 0o7777, ino=self._next_ino)
        self._next_ino += 1
        return node

    def _lookup(self, path: str) -> _Node:
        node = self._nodes.get(normalize_path(path))
        if node is None:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        return node

    def _parent_dir(self, key: str, path: str) -> _Node:
        parent = self._nodes.get(posixpath.dirname(key))
        if parent is None:
            raise _error(FileNotFoundError, errno.ENOENT, path)
        if not parent.is_dir:
            raise _error(NotADirectoryError, errno.ENOTDIR, path)
        return parent

    def _children(self, key: str) -> List[str]:
        prefix = key.rstrip("/") + "/"
        return [
            other for other in self._nodes
            if other != key and other.startswith(prefix)
        ]

    def open_file(self, path: str, flags: int, perm: int) -> MemoryFile:
        key = normalize_path(path)
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                if not flags & os.O_CREAT:
                    raise _error(FileNotFoundError, errno.ENOENT, path)
                self._parent_dir(key, path)
                node = self._new_node(False, perm)
                self._nodes[key] = node
            elif flags & os.O_CREAT and flags & os.O_EXCL:
                raise _error(FileExistsError, errno.EEXIST, path)

            if node.is_dir:
                raise _error(IsADirectoryError, errno.EISDIR, path)

            writable = flags & (os.O_WRONLY | os.O_RDWR)
            if flags & os.O_TRUNC and writable:
                del node.data[:]
                node.mtime = time.time()

        return MemoryFile(node, key, flags, self._lock)

    def mkdir(self, path: str, perm: int) -> None:
        key = normalize_path(path)
        with self._lock:
            if key in self._nodes:
                raise _error(FileExistsError, errno.EEXIST, path)
            self._parent_dir(key, path)
            self._nodes[key] = self._new_node(True, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        key = normalize_path(path)
        with self._lock:
            current = "/"
            for part in key.strip("/").split("/"):
                if not part:
                    continue
                current = posixpath.join(current, part)
                node = self._nodes.get(current)
                if node is None:
                    self._nodes[current] = self._new_node(True, perm)
                elif not node.is_dir:
                    raise _error(NotADirectoryError, errno.ENOTDIR, path)

    def remove(self, path: str) -> None:
        key = normalize_path(path)
        with self._lock:
            node = self._lookup(path)
            if key == "/":
                raise _error(OSError, errno.EBUSY, path)
            if node.is_dir and self._children(key):
                raise _error(OSError, errno.ENOTEMPTY, path)
            del self._nodes[key]

    def remove_all(self, path: str) -> None:
        key = normalize_path(path)
        with self._lock:
            if key not in self._nodes:
                return
            for child in self._children(key):
                del self._nodes[child]
            if key != "/":
                del self._nodes[key]

    def rename(self, old: str, new: str) -> None:
        old_key = normalize_path(old)
        new_key = normalize_path(new)
        with self._lock:
            node = self._lookup(old)
            if old_key == new_key:
                return
            if new_key.startswith(old_key.rstrip("/") + "/"):
                raise _error(OSError, errno.EINVAL, new)
            self._parent_dir(new_key, new)

            target = self._nodes.get(new_key)
            if target is not None:
                if target.is_dir and not node.is_dir:
                    raise _error(IsADirectoryError, errno.EISDIR, new)
                if node.is_dir and not target.is_dir:
                    raise _error(NotADirectoryError, errno.ENOTDIR, new)
                if target.is_dir and self._children(new_key):
                    raise _error(OSError, errno.ENOTEMPTY, new)

            moved = {old_key: node}
            for child in self._children(old_key):
                moved[new_key + child[len(old_key):]] = self._nodes.pop(child)
            del self._nodes[old_key]
            moved[new_key] = moved.pop(old_key)
            self._nodes.update(moved)
            node.ctime = time.time()

    def stat(self, path: str) -> os.stat_result:
        with self._lock:
            return self._lookup(path).to_stat()

    def read_dir(self, path: str) -> List[MemoryDirEntry]:
        key = normalize_path(path)
        with self._lock:
            node = self._lookup(path)
            if not node.is_dir:
                raise _error(NotADirectoryError, errno.ENOTDIR, path)
            names = sorted(
                posixpath.basename(child)
                for child in self._children(key)
                if posixpath.dirname(child) == key
            )
        return [MemoryDirEntry(self, key, name) for name in names]

    def chmod(self, path: str, mode: int) -> None:
        with self._lock:
            node = self._lookup(path)
            node.mode = mode & 0o7777
            node.ctime = time.time()

    def chtimes(self, path: str, atime: float, mtime: float) -> None:
        with self._lock:
            node = self._lookup(path)
            node.atime = atime
            node.mtime = mtime

    def chown(self, path: str, uid: int, gid: int) -> None:
        with self._lock:
            node = self._lookup(path)
            if uid != -1:
                node.uid = uid
            if gid != -1:
                node.gid = gid
            node.ctime = time.time()
