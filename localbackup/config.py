"""Settings management for localbackup.

Values are resolved in this order: environment variables, the settings
file at ``~/.config/localbackup/config`` and finally built-in defaults.
The settings file holds ``key = value`` lines; ``#`` starts a comment.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from .exceptions import BackupConfigError
from .utils import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    DEFAULT_MAX_ERRORS,
    DEFAULT_PROGRESS_INTERVAL,
    WINDOWS_DIR_MODE,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOCALBACKUP_"


def _is_windows() -> bool:
    return os.name == "nt"


@dataclass(frozen=True)
class Settings:
    """Tunables for one backup run."""

    max_errors: int = DEFAULT_MAX_ERRORS
    """Number of aggregated errors that aborts the run"""

    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    """A progress dot is printed every this many files"""

    dir_mode: int = field(
        default_factory=lambda: WINDOWS_DIR_MODE if _is_windows() else DEFAULT_DIR_MODE
    )
    """Permissions for created destination directories"""

    file_mode: int = DEFAULT_FILE_MODE
    """Permissions for copied files"""

    enforce_readonly: bool = field(default_factory=_is_windows)
    """Whether the platform refuses to overwrite read-only files"""

    def __post_init__(self) -> None:
        if self.max_errors < 1:
            raise BackupConfigError("max_errors must be at least 1")
        if self.progress_interval < 1:
            raise BackupConfigError("progress_interval must be at least 1")

    def with_overrides(self, **overrides: Optional[int]) -> "Settings":
        """Return a copy with the given non-None values replaced."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values) if values else self


class Config:
    """Reads settings from the environment and the settings file."""

    _INT_KEYS = ("max_errors", "progress_interval")

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Directory holding the settings file. Defaults to
                ~/.config/localbackup
        """
        if config_dir is None:
            config_dir = Path.home() / ".config" / "localbackup"
        self.config_dir = config_dir
        self.config_file = config_dir / "config"

    def get_config_path(self) -> Path:
        """Get the path to the settings file."""
        return self.config_file

    def _read_file(self) -> dict[str, str]:
        values: dict[str, str] = {}
        if not self.config_file.exists():
            return values
        try:
            text = self.config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise BackupConfigError(f"Cannot read {self.config_file}: {e}") from e

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                raise BackupConfigError(
                    f"{self.config_file}:{lineno}: expected 'key = value'"
                )
            key, value = line.split("=", 1)
            values[key.strip().lower()] = value.strip()
        return values

    def load(self) -> Settings:
        """Resolve settings from environment, settings file and defaults.

        Raises:
            BackupConfigError: If a value is not a valid integer
        """
        values = self._read_file()
        for key in self._INT_KEYS:
            env_value = os.environ.get(ENV_PREFIX + key.upper())
            if env_value is not None:
                values[key] = env_value.strip()

        parsed: dict[str, int] = {}
        for key in self._INT_KEYS:
            if key not in values:
                continue
            try:
                parsed[key] = int(values[key])
            except ValueError as e:
                raise BackupConfigError(
                    f"Invalid value for {key}: {values[key]!r}"
                ) from e

        unknown = set(values) - set(self._INT_KEYS)
        for key in sorted(unknown):
            logger.warning("Ignoring unknown setting: %s", key)

        logger.debug("Loaded settings: %s", parsed)
        return Settings(**parsed)


# Global config instance
config = Config()
