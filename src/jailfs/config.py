"""
Configuration for jailed filesystems.

Example:
    >>> config = JailConfig(base_path="/srv/data", label="uploads")
    >>> fs = create_jailed_filesystem(config)
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class JailConfig(BaseModel):
    """
    Settings for one jail layer.

    Attributes:
        base_path: Directory on the wrapped filesystem that becomes the virtual root
        path_flavor: Path conventions used to clean and join paths
        label: Name attached to this jail's log records
    """

    model_config = ConfigDict(frozen=True)

    base_path: str
    path_flavor: Literal["native", "posix", "windows"] = "native"
    label: Optional[str] = None

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, value: str) -> str:
        """Reject blank base paths."""
        if not value.strip():
            raise ValueError("base_path must not be empty")
        return value
