"""localbackup - mirror selected files into a locally synced folder."""

from .config import Config, Settings
from .exceptions import (
    BackupConfigError,
    BackupError,
    CopyError,
    TargetNotSpecifiedError,
)
from .sync import BackupEngine, BackupResult, BackupStatus, run_backup

__all__ = [
    "BackupEngine",
    "BackupResult",
    "BackupStatus",
    "run_backup",
    "Config",
    "Settings",
    "BackupError",
    "BackupConfigError",
    "CopyError",
    "TargetNotSpecifiedError",
]
