"""Base-path jail over an arbitrary filesystem.

Caller-facing paths are virtual paths rooted at the jail's base directory.
Real paths never leave the proxy except through ``real_path``.
"""

from __future__ import annotations

import functools
import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Optional, Tuple

from .base import FileSystem
from .exceptions import PathOutsideBaseError
from .paths import PathPolicy

if TYPE_CHECKING:
    from .config import JailConfig

logger = logging.getLogger(__name__)


# Attributes that hand out the wrapped object's own view of the real path.
_UNEXPOSED = frozenset({"raw", "buffer", "detach"})

_ErrorRewriter = Callable[[OSError], None]


def _leave_error(exc: OSError) -> None:
    return None


class _VirtualProxy:
    """Delegates to a wrapped object, rewriting paths in the errors it raises."""

    def __init__(self, target: Any, rewrite: Optional[_ErrorRewriter]) -> None:
        self._target = target
        self._rewrite = rewrite or _leave_error

    @contextmanager
    def _virtual_errors(self) -> Iterator[None]:
        try:
            yield
        except OSError as exc:
            self._rewrite(exc)
            raise

    def __getattr__(self, attr: str) -> Any:
        if attr in ("_target", "_rewrite"):
            raise AttributeError(attr)
        if attr in _UNEXPOSED:
            raise AttributeError(
                f"{type(self).__name__!r} object does not expose {attr!r}"
            )
        value = getattr(self._target, attr)
        if not callable(value):
            return value

        @functools.wraps(value)
        def call(*args: Any, **kwargs: Any) -> Any:
            with self._virtual_errors():
                return value(*args, **kwargs)

        return call


class JailedFile(_VirtualProxy):
    """File handle whose ``name`` is the virtual path it was opened with.

    Everything except the name is delegated to the wrapped handle. Errors
    raised by the handle carry virtual filenames, and the underlying raw
    stream is not exposed.
    """

    def __init__(
        self, file: Any, name: str, rewrite: Optional[_ErrorRewriter] = None
    ) -> None:
        super().__init__(file, rewrite)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __enter__(self) -> "JailedFile":
        with self._virtual_errors():
            self._target.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        with self._virtual_errors():
            return self._target.__exit__(exc_type, exc, tb)

    def __iter__(self) -> Iterator[Any]:
        with self._virtual_errors():
            yield from self._target

    def __repr__(self) -> str:
        return f"<JailedFile name={self._name!r}>"


class JailedDirEntry(_VirtualProxy):
    """Directory entry whose ``path`` is virtual.

    ``name`` is the wrapped entry's own name, which is already relative.
    """

    def __init__(
        self, entry: Any, path: str, rewrite: Optional[_ErrorRewriter] = None
    ) -> None:
        super().__init__(entry, rewrite)
        self._path = path

    @property
    def name(self) -> str:
        return self._target.name

    @property
    def path(self) -> str:
        return self._path

    def __fspath__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"<JailedDirEntry {self.name!r}>"


class JailedFileSystem(FileSystem):
    """Filesystem proxy that confines every path to a base directory.

    Each virtual path is cleaned lexically against the virtual root ``/``,
    rejected if it still climbs above it, and joined onto the base path
    before being handed to the source filesystem. A jail can wrap another
    jail; every layer confines independently under its own base.

    Caveat: confinement is purely textual. A symlink inside the base that
    points elsewhere is followed by the source filesystem, and an absolute
    real path passed as a virtual path is silently re-rooted under the base.

    Example:
        >>> fs = JailedFileSystem(MemoryFileSystem(), "/base/path")
        >>> fs.real_path("/tmp/foo")
        '/base/path/tmp/foo'
        >>> fs.real_path("../tmp/bar")
        Traceback (most recent call last):
        ...
        jailfs.exceptions.PathOutsideBaseError: [Errno 2] No such file or directory: '../tmp/bar'
    """

    def __init__(
        self,
        source: FileSystem,
        base_path: str,
        path_policy: Optional[PathPolicy] = None,
        label: Optional[str] = None,
    ) -> None:
        """Initialize the jail.

        Args:
            source: Filesystem that receives the real paths
            base_path: Directory on ``source`` that becomes the virtual root
            path_policy: Path conventions to apply (default: the host platform's)
            label: Name attached to this jail's log records
        """
        self._source = source
        self._paths = path_policy or PathPolicy.native()
        self._base = self._paths.clean(base_path)
        self._log_extra = {"jail": label or "-"}

    @property
    def name(self) -> str:
        return "JailedFileSystem"

    def real_path(self, path: str) -> str:
        """Resolve a virtual path to the path used on the source filesystem.

        This is the only way a real path leaves the jail.

        Args:
            path: Virtual path (absolute or relative)

        Returns:
            The real path, always equal to or below the base path

        Raises:
            PathOutsideBaseError: If the path lexically escapes the jail root
        """
        real = self._paths.join(self._base, self._paths.confine(path))
        if not self._paths.is_within(self._base, real):
            raise PathOutsideBaseError(path)
        return real

    def _resolve(self, operation: str, path: str) -> str:
        try:
            return self.real_path(path)
        except PathOutsideBaseError as exc:
            exc.operation = operation
            logger.debug(
                f"Refused {operation} on {path!r}: outside of the jail",
                extra=self._log_extra,
            )
            raise

    @contextmanager
    def _virtual_errors(self, *pairs: Tuple[str, str]) -> Iterator[None]:
        """Rewrite real paths in OSError filenames back to virtual ones.

        The exception object, its type and its errno are left as they are.
        """
        rewrite = self._rewriter(*pairs)
        try:
            yield
        except OSError as exc:
            rewrite(exc)
            raise

    def _rewriter(self, *pairs: Tuple[str, str]) -> _ErrorRewriter:
        known: Dict[str, str] = {real: virtual for real, virtual in pairs}

        def rewrite(exc: OSError) -> None:
            exc.filename = self._hide(exc.filename, known)
            exc.filename2 = self._hide(exc.filename2, known)

        return rewrite

    def _hide(self, value: Any, known: Dict[str, str]) -> Any:
        if not isinstance(value, str):
            return value
        if value in known:
            return known[value]
        virtual = self._paths.to_virtual(self._base, value)
        return value if virtual is None else virtual

    def open_file(self, path: str, flags: int, perm: int) -> JailedFile:
        real = self._resolve("open_file", path)
        with self._virtual_errors((real, path)):
            file = self._source.open_file(real, flags, perm)
        return JailedFile(file, path, self._rewriter((real, path)))

    def create(self, path: str) -> JailedFile:
        real = self._resolve("create", path)
        with self._virtual_errors((real, path)):
            file = self._source.create(real)
        return JailedFile(file, path, self._rewriter((real, path)))

    def open(self, path: str) -> JailedFile:
        real = self._resolve("open", path)
        with self._virtual_errors((real, path)):
            file = self._source.open(real)
        return JailedFile(file, path, self._rewriter((real, path)))

    def mkdir(self, path: str, perm: int) -> None:
        real = self._resolve("mkdir", path)
        with self._virtual_errors((real, path)):
            self._source.mkdir(real, perm)

    def mkdir_all(self, path: str, perm: int) -> None:
        real = self._resolve("mkdir_all", path)
        with self._virtual_errors((real, path)):
            self._source.mkdir_all(real, perm)

    def remove(self, path: str) -> None:
        real = self._resolve("remove", path)
        with self._virtual_errors((real, path)):
            self._source.remove(real)

    def remove_all(self, path: str) -> None:
        real = self._resolve("remove_all", path)
        with self._virtual_errors((real, path)):
            self._source.remove_all(real)

    def rename(self, old: str, new: str) -> None:
        real_old = self._resolve("rename", old)
        real_new = self._resolve("rename", new)
        with self._virtual_errors((real_old, old), (real_new, new)):
            self._source.rename(real_old, real_new)

    def stat(self, path: str) -> os.stat_result:
        real = self._resolve("stat", path)
        with self._virtual_errors((real, path)):
            return self._source.stat(real)

    def lstat_if_possible(self, path: str) -> Tuple[os.stat_result, bool]:
        real = self._resolve("lstat", path)
        with self._virtual_errors((real, path)):
            return self._source.lstat_if_possible(real)

    def read_dir(self, path: str) -> List[JailedDirEntry]:
        real = self._resolve("read_dir", path)
        with self._virtual_errors((real, path)):
            entries = self._source.read_dir(real)
        return [self._wrap_entry(entry, real, path) for entry in entries]

    def _wrap_entry(self, entry: Any, real_dir: str, path: str) -> JailedDirEntry:
        virtual = self._paths.join(path, entry.name)
        pairs = [(self._paths.join(real_dir, entry.name), virtual)]
        entry_path = getattr(entry, "path", None)
        if isinstance(entry_path, str):
            pairs.append((entry_path, virtual))
        return JailedDirEntry(entry, virtual, self._rewriter(*pairs))

    def chmod(self, path: str, mode: int) -> None:
        real = self._resolve("chmod", path)
        with self._virtual_errors((real, path)):
            self._source.chmod(real, mode)

    def chtimes(self, path: str, atime: float, mtime: float) -> None:
        real = self._resolve("chtimes", path)
        with self._virtual_errors((real, path)):
            self._source.chtimes(real, atime, mtime)

    def chown(self, path: str, uid: int, gid: int) -> None:
        real = self._resolve("chown", path)
        with self._virtual_errors((real, path)):
            self._source.chown(real, uid, gid)

    def symlink(self, old: str, new: str) -> None:
        real_old = self._resolve("symlink", old)
        real_new = self._resolve("symlink", new)
        with self._virtual_errors((real_old, old), (real_new, new)):
            self._source.symlink(real_old, real_new)

    def readlink(self, path: str) -> str:
        """Return a link target, rewritten into virtual space when it is inside the jail."""
        real = self._resolve("readlink", path)
        with self._virtual_errors((real, path)):
            target = self._source.readlink(real)
        virtual = self._paths.to_virtual(self._base, target)
        return target if virtual is None else virtual


def create_jailed_filesystem(
    config: "JailConfig",
    source: Optional[FileSystem] = None,
) -> JailedFileSystem:
    """
    Create a jailed filesystem from configuration.

    Args:
        config: Jail configuration
        source: Filesystem to wrap (if None, uses the OS filesystem)

    Returns:
        Configured JailedFileSystem

    Example:
        >>> fs = create_jailed_filesystem(JailConfig(base_path="/srv/data"))
        >>> fs.real_path("/reports/q1.csv")
        '/srv/data/reports/q1.csv'
    """
    if source is None:
        from .osfs import OsFileSystem

        source = OsFileSystem()

    return JailedFileSystem(
        source,
        config.base_path,
        path_policy=PathPolicy.for_flavor(config.path_flavor),
        label=config.label,
    )
