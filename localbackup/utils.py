"""Utility functions for localbackup."""

import os
import re
from datetime import datetime, time, timedelta
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Every Nth visited file prints a progress dot
DEFAULT_PROGRESS_INTERVAL: int = 100

# Aggregated errors that abort the run
DEFAULT_MAX_ERRORS: int = 100

# Permissions for created directories and copied files
DEFAULT_DIR_MODE: int = 0o770
WINDOWS_DIR_MODE: int = 0o777
DEFAULT_FILE_MODE: int = 0o660

_INTEGER = re.compile(r"[+-]?\d+")


# =============================================================================
# Parsing utilities
# =============================================================================


def parse_int(text: str) -> Optional[int]:
    """Parse a plain decimal integer.

    Unlike ``int()``, surrounding whitespace and digit separators are
    rejected.

    Args:
        text: Text to parse

    Returns:
        The integer, or None if text is not a plain integer

    Examples:
        >>> parse_int("30")
        30
        >>> parse_int("-2")
        -2
        >>> parse_int("100 days") is None
        True
        >>> parse_int("1_000") is None
        True
    """
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


# =============================================================================
# Date utilities
# =============================================================================


def start_of_day(days_ago: int, now: Optional[datetime] = None) -> datetime:
    """Return local midnight of the day ``days_ago`` days before ``now``.

    Args:
        days_ago: Number of days to go back
        now: Reference time (defaults to the current local time)

    Returns:
        Timezone-aware datetime at 00:00 local time
    """
    if now is None:
        now = datetime.now()
    day = (now - timedelta(days=days_ago)).date()
    return datetime.combine(day, time.min).astimezone()


# =============================================================================
# Path utilities
# =============================================================================


def strip_trailing_separator(path: str) -> str:
    """Remove a single trailing path separator.

    Examples:
        >>> strip_trailing_separator("/backup/")
        '/backup'
        >>> strip_trailing_separator("/backup")
        '/backup'
    """
    if path.endswith(os.sep):
        return path[: -len(os.sep)]
    return path


def rebase_path(target_root: str, source_path: str) -> str:
    """Re-root a source path under the target root.

    The drive (or UNC share) and the leading separators of the source are
    dropped, everything else is kept.

    Examples:
        >>> rebase_path("/backup", "/home/user/notes.txt")
        '/backup/home/user/notes.txt'
    """
    _, rest = os.path.splitdrive(source_path)
    return os.path.join(target_root, rest.lstrip(os.sep + (os.altsep or "")))


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
