"""Helpers that work on top of any ``FileSystem``.

They only call the filesystem's public operations, so when given a jailed
filesystem every path they take and return is virtual.
"""

import logging
import os
import stat
import tempfile
import uuid
from typing import Any, List

from .base import FileSystem

logger = logging.getLogger(__name__)

# Attempts before giving up on finding an unused temporary name
MAX_TEMP_ATTEMPTS = 10000


def _random_part() -> str:
    return uuid.uuid4().hex[:10]


def _split_pattern(pattern: str):
    """Split a temp-file pattern at its last '*' into (prefix, suffix)."""
    if os.sep in pattern or (os.altsep and os.altsep in pattern):
        raise ValueError(f"pattern contains path separator: {pattern!r}")
    prefix, star, suffix = pattern.rpartition("*")
    if not star:
        return pattern, ""
    return prefix, suffix


def temp_dir(fs: FileSystem, dir: str = "", prefix: str = "") -> str:
    """
    Create a new, uniquely named directory.

    Args:
        fs: Filesystem to create the directory on
        dir: Parent directory (if empty, uses the system temp directory name)
        prefix: Prefix for the directory name

    Returns:
        Path of the new directory, as understood by ``fs``
    """
    parent = dir or tempfile.gettempdir()
    for _ in range(MAX_TEMP_ATTEMPTS):
        candidate = os.path.join(parent, prefix + _random_part())
        try:
            fs.mkdir(candidate, 0o700)
        except FileExistsError:
            continue
        return candidate
    raise FileExistsError(f"could not create a unique directory in {parent!r}")


def temp_file(fs: FileSystem, dir: str = "", pattern: str = "") -> Any:
    """
    Create and open a new, uniquely named file for reading and writing.

    The last '*' in ``pattern`` is replaced by the random part; without a '*'
    the random part is appended.

    Args:
        fs: Filesystem to create the file on
        dir: Parent directory (if empty, uses the system temp directory name)
        pattern: Name pattern such as ``"report-*.csv"``

    Returns:
        Open file handle; closing it is the caller's job
    """
    parent = dir or tempfile.gettempdir()
    prefix, suffix = _split_pattern(pattern)
    flags = os.O_RDWR | os.O_CREAT | os.O_EXCL
    for _ in range(MAX_TEMP_ATTEMPTS):
        candidate = os.path.join(parent, prefix + _random_part() + suffix)
        try:
            return fs.open_file(candidate, flags, 0o600)
        except FileExistsError:
            continue
    raise FileExistsError(f"could not create a unique file in {parent!r}")


def read_dir(fs: FileSystem, dirname: str) -> List[Any]:
    """List a directory, sorted by entry name."""
    return sorted(fs.read_dir(dirname), key=lambda entry: entry.name)


def read_file(fs: FileSystem, filename: str) -> bytes:
    with fs.open(filename) as handle:
        return handle.read()


def write_file(fs: FileSystem, filename: str, data: bytes, perm: int = 0o644) -> None:
    """Write ``data`` to a file, creating or truncating it."""
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    with fs.open_file(filename, flags, perm) as handle:
        handle.write(data)
    logger.debug(f"Wrote {len(data)} bytes to {filename}")


def exists(fs: FileSystem, path: str) -> bool:
    try:
        fs.stat(path)
    except FileNotFoundError:
        return False
    return True


def is_dir(fs: FileSystem, path: str) -> bool:
    """Return True if ``path`` is a directory; raises if it does not exist."""
    return stat.S_ISDIR(fs.stat(path).st_mode)


def dir_exists(fs: FileSystem, path: str) -> bool:
    try:
        return is_dir(fs, path)
    except FileNotFoundError:
        return False
