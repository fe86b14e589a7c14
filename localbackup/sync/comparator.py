"""Per-file decision whether a source file must be copied."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import Settings
from ..output import OutputFormatter
from ..utils import format_size, rebase_path
from .operations import FileDescriptor, FileOperations
from .state import RunState

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Outcome of handling one file."""

    COPY = "copy"
    """File was copied (or would be, in dry-run mode)"""

    SKIP = "skip"
    """File needs no copy or is filtered out"""

    ERROR = "error"
    """File could not be copied; an error was recorded"""


@dataclass
class SyncDecision:
    """Represents a decision about one source file."""

    action: SyncAction
    """Action taken"""

    reason: str
    """Human-readable reason for this decision"""

    source: FileDescriptor
    """Source file"""

    destination: Optional[str] = None
    """Destination path (once computed)"""


class SyncPolicy:
    """Decides per file whether to copy it, and copies it.

    The checks run from cheapest to most expensive: source metadata and
    filters first, then a stat of the destination, then the copy.
    """

    def __init__(
        self,
        fs: FileOperations,
        state: RunState,
        output: OutputFormatter,
        settings: Settings,
    ):
        self.fs = fs
        self.state = state
        self.output = output
        self.settings = settings

    def destination_for(self, source_path: str) -> str:
        """Map a source path to its place under the target root."""
        return rebase_path(self.state.target_path, source_path)

    def handle_file(self, src: FileDescriptor) -> SyncDecision:
        """Decide about one file and carry out the decision.

        Args:
            src: Descriptor of the source file

        Returns:
            SyncDecision describing what happened
        """
        state = self.state
        counts = state.counts
        counts.files += 1
        if not state.dry_run and counts.files % self.settings.progress_interval == 0:
            self.output.progress_tick()

        if src.is_symlink:
            return self._skip(src, "Symbolic link")

        filters = state.filters
        if filters.is_too_large(src.size):
            return self._skip(src, f"Larger than max size ({format_size(src.size)})")

        if filters.is_too_old(src.mtime):
            return self._skip(src, "Modified before start date")

        if filters.is_excluded(src.path):
            return self._skip(src, "Matches exclude pattern")

        dest_path = self.destination_for(src.path)
        try:
            dest = self.fs.stat(dest_path)
        except OSError:
            dest = None

        if dest is not None:
            self._clear_readonly(dest)
            if dest.mtime >= src.mtime:
                return self._skip(src, "Destination is up to date", dest_path)
        elif not state.dry_run:
            try:
                self.fs.mkdir_all(os.path.dirname(dest_path), self.settings.dir_mode)
            except OSError as e:
                logger.debug("mkdir failed for %s: %s", dest_path, e)
                return self._fail(
                    src, f"Cannot create dirs for: {dest_path}", dest_path
                )

        if state.dry_run:
            self.output.print(src.path)
            counts.copied += 1
            return SyncDecision(SyncAction.COPY, "Would copy", src, dest_path)

        try:
            self.fs.copy_file(src.path, dest_path, src)
        except OSError as e:
            return self._fail(src, str(e), dest_path)

        counts.copied += 1
        reason = "New file" if dest is None else "Source is newer"
        logger.debug("Copied %s -> %s (%s)", src.path, dest_path, reason)
        return SyncDecision(SyncAction.COPY, reason, src, dest_path)

    def _clear_readonly(self, dest: FileDescriptor) -> None:
        """Make a read-only destination writable where the OS enforces it."""
        if self.state.dry_run or not self.settings.enforce_readonly:
            return
        if dest.is_writable:
            return
        try:
            self.fs.chmod(dest.path, self.settings.file_mode)
        except OSError as e:
            logger.warning("Cannot make %s writable: %s", dest.path, e)

    def _skip(
        self, src: FileDescriptor, reason: str, dest_path: Optional[str] = None
    ) -> SyncDecision:
        logger.debug("Skipping %s: %s", src.path, reason)
        return SyncDecision(SyncAction.SKIP, reason, src, dest_path)

    def _fail(self, src: FileDescriptor, message: str, dest_path: str) -> SyncDecision:
        self.state.errors.record(message)
        return SyncDecision(SyncAction.ERROR, message, src, dest_path)
