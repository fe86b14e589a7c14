"""Exceptions raised by localbackup."""

from typing import Optional


class BackupError(Exception):
    """Base exception for all backup errors."""


class BackupConfigError(BackupError):
    """Raised when settings cannot be loaded or are invalid."""


class TargetNotSpecifiedError(BackupError):
    """Raised when a source path appears before any target directive."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "target path must be specified before any source paths"
        )


class CopyError(OSError):
    """Raised by a copy strategy when a file cannot be copied.

    The message is meant to be shown to the user as is.
    """
