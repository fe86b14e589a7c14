"""Interpretation of backup configuration directives.

A configuration is a list of lines. Each line is either a directive that
changes the run state or the path of a source to back up:

    # comment
    => /backup             set target root
    !@ 30                  only files modified since midnight 30 days ago
    !> 100000000           only files up to this many bytes
    ! \\.tmp$,,/cache/      replace exclude patterns
    !+ \\.bak$              add exclude patterns
    /home/user/docs        source path
"""

import logging
import re
from typing import Callable, Optional

from ..exceptions import TargetNotSpecifiedError
from ..output import OutputFormatter
from ..utils import parse_int, start_of_day, strip_trailing_separator
from .filters import parse_patterns
from .state import RunState

logger = logging.getLogger(__name__)

COMMENT_RE = re.compile(r"^#")
TARGET_RE = re.compile(r"^=>\s*(.*)")
MAX_AGE_RE = re.compile(r"^!@\s*(.*?)\s*$")
MAX_SIZE_RE = re.compile(r"^!>\s*(.*?)\s*$")
EXTEND_EXCLUDE_RE = re.compile(r"^!\+\s*(.*)")
EXCLUDE_RE = re.compile(r"^!\s*(.*)")


class DirectiveInterpreter:
    """Applies configuration directives to a RunState."""

    def __init__(self, state: RunState, output: OutputFormatter):
        self.state = state
        self.output = output
        self._handlers: list[tuple[re.Pattern, Callable[[str, str], None]]] = [
            (TARGET_RE, self._set_target),
            (MAX_AGE_RE, self._set_max_age),
            (MAX_SIZE_RE, self._set_max_size),
            (EXTEND_EXCLUDE_RE, self._extend_exclude),
            (EXCLUDE_RE, self._replace_exclude),
        ]

    def apply(self, line: str) -> bool:
        """Apply one trimmed configuration line.

        Args:
            line: Configuration line with surrounding whitespace removed

        Returns:
            True if the line was a directive, comment or blank line; False if
            it names a source path
        """
        if not line or COMMENT_RE.match(line):
            return True

        for regex, handler in self._handlers:
            match = regex.match(line)
            if match:
                handler(line, match.group(1))
                return True
        return False

    def require_target(self) -> None:
        """Ensure a target has been declared before processing a source.

        Raises:
            TargetNotSpecifiedError: If no target directive was seen yet
        """
        if not self.state.target_path:
            raise TargetNotSpecifiedError()

    def _set_target(self, line: str, arg: str) -> None:
        self.state.target_path = strip_trailing_separator(arg)
        self.output.info(f"target {self.state.target_path}")

    def _parse_number(self, line: str, arg: str) -> Optional[int]:
        value = parse_int(arg)
        if value is None:
            self.output.warning(f"Expected only number in: {line}")
        return value

    def _set_max_age(self, line: str, arg: str) -> None:
        days = self._parse_number(line, arg)
        if days is None:
            return
        start_date = start_of_day(days)
        self.state.filters = self.state.filters.with_start_date(start_date)
        self.output.info(f"since {start_date}")

    def _set_max_size(self, line: str, arg: str) -> None:
        max_size = self._parse_number(line, arg)
        if max_size is None:
            return
        self.state.filters = self.state.filters.with_max_size(max_size)
        self.output.info(f"max size {max_size}")

    def _parse_excludes(self, arg: str) -> list[re.Pattern]:
        patterns, errors = parse_patterns(arg)
        for message in errors:
            if not self.state.errors.record(message):
                break
        return patterns

    def _extend_exclude(self, line: str, arg: str) -> None:
        patterns = self._parse_excludes(arg)
        self.state.filters = self.state.filters.extend_excludes(patterns)
        self.output.info(f"extend exclude {arg}")

    def _replace_exclude(self, line: str, arg: str) -> None:
        if not arg.strip():
            # A bare "!" clears all exclusions
            self.state.filters = self.state.filters.clear_excludes()
            self.output.info(f"exclude {arg}")
            return
        patterns = self._parse_excludes(arg)
        self.state.filters = self.state.filters.replace_excludes(patterns)
        self.output.info(f"exclude {arg}")
        logger.debug(
            "Active exclude patterns: %s",
            [p.pattern for p in self.state.filters.exclude],
        )
