"""Filter state deciding which sources are eligible for backup."""

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

PATTERN_DELIMITER = ",,"


def parse_patterns(arg: str) -> tuple[list[re.Pattern], list[str]]:
    """Compile a ``,,``-separated list of regular expressions.

    Empty pieces are ignored, so an empty or all-whitespace argument
    yields no patterns at all.

    Args:
        arg: Directive argument, e.g. ``\\.tmp$,,/cache/``

    Returns:
        Tuple of (compiled patterns, error messages for pieces that failed
        to compile)

    Examples:
        >>> patterns, errors = parse_patterns(r"\\.tmp$,,/cache/")
        >>> [p.pattern for p in patterns]
        ['\\\\.tmp$', '/cache/']
        >>> parse_patterns("   ")
        ([], [])
    """
    patterns: list[re.Pattern] = []
    errors: list[str] = []
    for piece in arg.strip().split(PATTERN_DELIMITER):
        if not piece:
            continue
        try:
            patterns.append(re.compile(piece))
        except re.error as e:
            logger.debug("Invalid exclude pattern %r: %s", piece, e)
            errors.append(f"Error in exclude regexp: {piece}")
    return patterns, errors


@dataclass(frozen=True)
class FilterSet:
    """Snapshot of the active filters.

    Directives never mutate a FilterSet; they derive a new one, so every
    file is evaluated against exactly one snapshot.
    """

    start_date: Optional[datetime] = None
    """Files modified before this are ineligible (None: no age limit)"""

    max_size: Optional[int] = None
    """Files larger than this many bytes are ineligible (None: unbounded)"""

    exclude: tuple[re.Pattern, ...] = field(default_factory=tuple)
    """Patterns searched in full paths; a match excludes the path"""

    def with_start_date(self, start_date: datetime) -> "FilterSet":
        return replace(self, start_date=start_date)

    def with_max_size(self, max_size: int) -> "FilterSet":
        return replace(self, max_size=max_size)

    def replace_excludes(self, patterns: list[re.Pattern]) -> "FilterSet":
        """Return a snapshot whose exclusions are exactly ``patterns``."""
        return replace(self, exclude=tuple(patterns))

    def extend_excludes(self, patterns: list[re.Pattern]) -> "FilterSet":
        """Return a snapshot with ``patterns`` appended to the exclusions."""
        return replace(self, exclude=self.exclude + tuple(patterns))

    def clear_excludes(self) -> "FilterSet":
        """Return a snapshot without any exclusions."""
        return replace(self, exclude=())

    def is_too_large(self, size: int) -> bool:
        return self.max_size is not None and size > self.max_size

    def is_too_old(self, mtime: float) -> bool:
        return self.start_date is not None and mtime < self.start_date.timestamp()

    def is_excluded(self, path: str) -> bool:
        """Check whether any exclude pattern occurs in ``path``."""
        return any(pattern.search(path) for pattern in self.exclude)
