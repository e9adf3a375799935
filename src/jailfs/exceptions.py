"""
jailfs Exception Hierarchy

This module defines the exceptions raised by the path-jailing filesystem layer.

The hierarchy is designed to:
1. Keep a single catchable base class (JailFsError) for everything jailfs raises
2. Make an escaped path indistinguishable from a missing one (FileNotFoundError)
3. Carry structured context for logging without ever including a real base path

Errors raised by an underlying filesystem are NOT part of this hierarchy; they
pass through as the built-in OSError family.
"""

import errno
import time
from typing import Any, Dict, Optional


class JailFsError(Exception):
    """
    Base exception class for all jailfs errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        timestamp: When the error occurred
        context: Additional context information
        user_message: User-friendly error message
        developer_message: Detailed technical error message
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "JAILFS_ERROR",
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Initialize error with context.

        Args:
            message: Technical error message for developers
            error_code: Unique error code for programmatic handling
            context: Additional context information
            user_message: User-friendly error message
            suggestion: Suggested fix or next steps
        """
        super().__init__(message)
        self.error_code = error_code
        self.timestamp = time.time()
        self.context = context or {}
        self.user_message = user_message or message
        self.developer_message = message
        self.suggestion = suggestion

    @property
    def message(self) -> str:
        """Return the developer message."""
        return self.developer_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.developer_message,
            "user_message": self.user_message,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.developer_message}"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class JailConfigurationError(JailFsError):
    """
    Raised when a jail is built from invalid settings.

    Examples:
    - Unknown path flavor name
    """

    def __init__(
        self,
        message: str,
        config_field: Optional[str] = None,
        config_value: Any = None,
        **kwargs
    ):
        self.config_field = config_field
        self.config_value = config_value

        context = kwargs.pop("context", None) or {}
        if config_field:
            context["config_field"] = config_field
        if config_value is not None:
            context["config_value"] = repr(config_value)

        error_code = kwargs.pop("error_code", "JAIL_CONFIGURATION_ERROR")
        super().__init__(message, error_code=error_code, context=context, **kwargs)


# =============================================================================
# PATH RESOLUTION ERRORS
# =============================================================================

class PathOutsideBaseError(FileNotFoundError, JailFsError):
    """
    Raised when a virtual path lexically climbs above the jail root.

    It is a FileNotFoundError (errno ENOENT) so that callers cannot tell an
    escape attempt from a missing file. ``filename`` is always the virtual path
    the caller supplied.
    """

    def __init__(self, path: str, operation: Optional[str] = None):
        JailFsError.__init__(
            self,
            f"real path is outside of the base path: {path!r}",
            error_code="PATH_OUTSIDE_BASE",
            context={"path": path, "operation": operation},
            user_message="No such file or directory",
        )
        FileNotFoundError.__init__(
            self, errno.ENOENT, "No such file or directory", path
        )
        self.path = path
        self._operation = operation

    @property
    def operation(self) -> Optional[str]:
        """Name of the filesystem operation that was refused, if known."""
        return self._operation

    @operation.setter
    def operation(self, value: Optional[str]) -> None:
        self._operation = value
        self.context["operation"] = value


# =============================================================================
# CAPABILITY ERRORS
# =============================================================================

class OperationNotSupportedError(JailFsError):
    """
    Raised when a filesystem does not implement an optional capability.

    Examples:
    - symlink() on a filesystem without links
    - readlink() on a filesystem without links
    """

    def __init__(self, operation: str, filesystem: str, **kwargs):
        self.operation = operation
        self.filesystem = filesystem

        context = kwargs.pop("context", None) or {}
        context.update({"operation": operation, "filesystem": filesystem})

        error_code = kwargs.pop("error_code", "OPERATION_NOT_SUPPORTED")
        super().__init__(
            f"{filesystem} does not support {operation}",
            error_code=error_code,
            context=context,
            **kwargs
        )
