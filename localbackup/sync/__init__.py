"""Backup engine - directive interpretation, traversal and copy decisions."""

from .comparator import SyncAction, SyncDecision, SyncPolicy
from .directives import DirectiveInterpreter
from .engine import BackupEngine, run_backup
from .errors import BackupResult, BackupStatus, ErrorAggregator
from .filters import FilterSet, parse_patterns
from .operations import (
    FileDescriptor,
    FileOperations,
    LocalFileOperations,
    WalkControl,
    create_file_operations,
    native_copy,
    select_copy_strategy,
    stream_copy,
)
from .scanner import DirectoryScanner
from .state import BackupCounts, RunState

__all__ = [
    "BackupEngine",
    "run_backup",
    "BackupResult",
    "BackupStatus",
    "ErrorAggregator",
    "DirectiveInterpreter",
    "DirectoryScanner",
    "SyncPolicy",
    "SyncAction",
    "SyncDecision",
    "FilterSet",
    "parse_patterns",
    "FileDescriptor",
    "FileOperations",
    "LocalFileOperations",
    "WalkControl",
    "create_file_operations",
    "select_copy_strategy",
    "native_copy",
    "stream_copy",
    "RunState",
    "BackupCounts",
]
