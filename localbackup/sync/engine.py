"""Core backup engine executing a configuration."""

import logging
from collections.abc import Iterable
from typing import Optional, TextIO

from ..config import Settings
from ..exceptions import TargetNotSpecifiedError
from ..output import OutputFormatter
from .comparator import SyncPolicy
from .directives import DirectiveInterpreter
from .errors import BackupResult, BackupStatus, ErrorAggregator
from .operations import FileOperations, create_file_operations
from .scanner import DirectoryScanner
from .state import RunState

logger = logging.getLogger(__name__)


class BackupEngine:
    """Runs a backup configuration line by line."""

    def __init__(
        self,
        fs: Optional[FileOperations] = None,
        output: Optional[OutputFormatter] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize backup engine.

        Args:
            fs: Filesystem operations (defaults to the local filesystem with
                the copy strategy of the running platform)
            output: Output formatter for progress and results
            settings: Run settings (defaults to built-in defaults)
        """
        self.settings = settings or Settings()
        self.fs = fs or create_file_operations(file_mode=self.settings.file_mode)
        self.output = output or OutputFormatter()

    def run(self, config_lines: Iterable[str], dry_run: bool = False) -> BackupResult:
        """Back up all sources named in a configuration.

        Args:
            config_lines: Lines of the backup configuration
            dry_run: If True, only report what would be copied

        Returns:
            BackupResult describing the outcome

        Examples:
            engine = BackupEngine()
            result = engine.run(["=> /mnt/sync/backup", "/home/user/docs"])
            print(result.message or "done")
        """
        errors = ErrorAggregator(self.output, max_errors=self.settings.max_errors)
        state = RunState(errors=errors, dry_run=dry_run)
        interpreter = DirectiveInterpreter(state, self.output)
        policy = SyncPolicy(self.fs, state, self.output, self.settings)
        scanner = DirectoryScanner(self.fs, state, policy, self.output, self.settings)

        try:
            for raw_line in config_lines:
                if state.stopped:
                    break
                line = raw_line.strip()
                if interpreter.apply(line):
                    continue
                interpreter.require_target()
                self._backup_source(line, state, policy, scanner)
        except TargetNotSpecifiedError as e:
            self.output.fatal(str(e))
            return BackupResult(status=BackupStatus.NO_TARGET, message=str(e))
        except Exception as e:
            logger.exception("Unexpected error during backup")
            self.output.error(f"Unexpected error: {e}")
            errors.record(f"Unexpected error: {e}")

        errors.report()
        result = errors.result()
        logger.debug("Backup finished: %s", result.status.value)
        return result

    def _backup_source(
        self,
        path: str,
        state: RunState,
        policy: SyncPolicy,
        scanner: DirectoryScanner,
    ) -> None:
        try:
            info = self.fs.stat(path)
        except OSError as e:
            logger.debug("Cannot stat %s: %s", path, e)
            state.errors.record(f"Cannot stat, skipping: {path}")
            return

        self.output.print(f"\n{path}")
        if info.is_dir:
            scanner.scan(path)
        else:
            state.reset_counts()
            policy.handle_file(info)


def run_backup(
    config_lines: Iterable[str],
    out: Optional[TextIO] = None,
    dry_run: bool = False,
    *,
    fs: Optional[FileOperations] = None,
    settings: Optional[Settings] = None,
) -> BackupResult:
    """Run a backup configuration.

    Args:
        config_lines: Lines of the backup configuration
        out: Text sink for progress and results (defaults to stdout)
        dry_run: If True, only report what would be copied
        fs: Filesystem operations to use
        settings: Run settings

    Returns:
        BackupResult describing the outcome
    """
    engine = BackupEngine(fs=fs, output=OutputFormatter(file=out), settings=settings)
    return engine.run(config_lines, dry_run=dry_run)
