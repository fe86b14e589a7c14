"""Directory traversal for backup sources."""

import logging
import os
from typing import Optional

from ..config import Settings
from ..output import OutputFormatter
from .comparator import SyncPolicy
from .operations import FileDescriptor, FileOperations, WalkControl
from .state import RunState

logger = logging.getLogger(__name__)


def directory_key(path: str) -> str:
    """Path used to match exclude patterns against a directory.

    A trailing separator lets patterns such as ``/cache/`` target
    directories only.

    Examples:
        >>> directory_key("/home/user")
        '/home/user/'
        >>> directory_key("/home/user/")
        '/home/user/'
    """
    return path.rstrip(os.sep) + os.sep


class DirectoryScanner:
    """Walks a source directory and hands every file to the SyncPolicy.

    Directories matching an exclude pattern are pruned together with
    everything below them.

    Examples:
        scanner = DirectoryScanner(fs, state, policy, output, settings)
        scanner.scan("/home/user/documents")  # "Dirs: 4, Files: 12, Copied: 3"
    """

    def __init__(
        self,
        fs: FileOperations,
        state: RunState,
        policy: SyncPolicy,
        output: OutputFormatter,
        settings: Settings,
    ):
        self.fs = fs
        self.state = state
        self.policy = policy
        self.output = output
        self.settings = settings

    def scan(self, root: str) -> None:
        """Back up everything below ``root`` and print a summary.

        Args:
            root: Source directory
        """
        self.state.reset_counts()
        self.fs.walk_dir(root, self._visit)
        if self.state.stopped:
            return

        counts = self.state.counts
        if counts.files >= self.settings.progress_interval:
            # terminate the progress dots
            self.output.print()
        copied_label = "Would copy" if self.state.dry_run else "Copied"
        self.output.print(
            f"Dirs: {counts.dirs}, Files: {counts.files}, "
            f"{copied_label}: {counts.copied}"
        )

    def _visit(
        self, path: str, info: Optional[FileDescriptor], error: Optional[OSError]
    ) -> WalkControl:
        if self.state.stopped:
            return WalkControl.STOP

        if error is not None or info is None:
            logger.debug("Walk error at %s: %s", path, error)
            self.state.errors.record(f"Cannot read, skipping: {path}")
            return WalkControl.STOP if self.state.stopped else WalkControl.CONTINUE

        if info.is_dir:
            if self.state.filters.is_excluded(directory_key(path)):
                logger.debug("Pruning excluded directory: %s", path)
                return WalkControl.SKIP_DIR
            self.state.counts.dirs += 1
            return WalkControl.CONTINUE

        self.policy.handle_file(info)
        return WalkControl.STOP if self.state.stopped else WalkControl.CONTINUE
