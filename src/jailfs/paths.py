"""Separator-sensitive path handling for jailed filesystems.

Every piece of logic that depends on the platform's path conventions (cleaning,
joining, prefix checks) lives behind ``PathPolicy`` so the rest of the package
never touches ``os.path`` directly. Virtual paths are confined lexically: the
underlying filesystem is never consulted.

Example:
    >>> policy = PathPolicy.posix()
    >>> policy.confine("/tmp/../etc/passwd")
    'etc/passwd'
    >>> policy.join("/base/path", policy.confine("/tmp/foo"))
    '/base/path/tmp/foo'
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from types import ModuleType
from typing import Optional

from .exceptions import JailConfigurationError, PathOutsideBaseError

FLAVORS = ("native", "posix", "windows")


class PathPolicy:
    """Lexical path operations for one platform flavor.

    Wraps one of the standard path modules (``posixpath``, ``ntpath`` or
    ``os.path``) and exposes only the operations a jail needs.
    """

    def __init__(self, module: ModuleType) -> None:
        self._module = module
        self.sep: str = module.sep
        self._seps = module.sep + (module.altsep or "")

    @classmethod
    def native(cls) -> "PathPolicy":
        return cls(os.path)

    @classmethod
    def posix(cls) -> "PathPolicy":
        return cls(posixpath)

    @classmethod
    def windows(cls) -> "PathPolicy":
        return cls(ntpath)

    @classmethod
    def for_flavor(cls, flavor: str) -> "PathPolicy":
        """Build a policy from a flavor name.

        Args:
            flavor: One of ``"native"``, ``"posix"`` or ``"windows"``

        Raises:
            JailConfigurationError: If the flavor is unknown
        """
        if flavor == "native":
            return cls.native()
        if flavor == "posix":
            return cls.posix()
        if flavor == "windows":
            return cls.windows()
        raise JailConfigurationError(
            f"Unknown path flavor {flavor!r}, expected one of {', '.join(FLAVORS)}",
            config_field="path_flavor",
            config_value=flavor,
        )

    def clean(self, path: str) -> str:
        """Lexically clean a path; the empty path cleans to ``.``."""
        return self._module.normpath(path) if path else self._module.curdir

    def confine(self, path: str) -> str:
        """Reduce a virtual path to a relative path under the jail root.

        Drive letters and UNC shares are dropped, ``.``/``..`` segments are
        resolved against the virtual root and leading separators are removed.

        Args:
            path: Virtual path as given by the caller

        Returns:
            The confined relative path, or ``""`` for the jail root

        Raises:
            PathOutsideBaseError: If cleaning leaves ``..`` at the front
        """
        _, tail = self._module.splitdrive(path)
        cleaned = self.clean(tail)

        head = cleaned.lstrip(self._seps)
        first = head.split(self.sep, 1)[0]
        if first == self._module.pardir:
            raise PathOutsideBaseError(path)

        if head == self._module.curdir:
            return ""
        return head

    def join(self, base: str, rel: str) -> str:
        if not rel:
            return base
        return self._module.join(base, rel)

    def is_within(self, base: str, path: str) -> bool:
        """Return True if ``path`` equals ``base`` or lies below it."""
        if path == base:
            return True
        drive, rest = self._module.splitdrive(base)
        if drive and not rest:
            # Drive-relative base such as "C:" joins without a separator.
            tail = path[len(base):]
            return path.startswith(base) and not tail.startswith(tuple(self._seps))
        return path.startswith(base.rstrip(self._seps) + self.sep)

    def to_virtual(self, base: str, real: str) -> Optional[str]:
        """Strip ``base`` from a real path, giving a rooted virtual path.

        Returns None when ``real`` is not under ``base``.
        """
        if not self.is_within(base, real):
            return None
        rest = real[len(base.rstrip(self._seps)):]
        return self.sep + rest.lstrip(self._seps)

    def __repr__(self) -> str:
        return f"PathPolicy({self._module.__name__})"
