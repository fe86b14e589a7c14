"""Mutable state of a single backup run."""

from dataclasses import dataclass, field

from .errors import ErrorAggregator
from .filters import FilterSet


@dataclass
class BackupCounts:
    """Statistics for one source argument."""

    dirs: int = 0
    files: int = 0
    copied: int = 0


@dataclass
class RunState:
    """State shared by the interpreter, scanner and policy during one run.

    Only ``filters`` is replaced as a whole; ``counts`` is reset for every
    source argument.
    """

    errors: ErrorAggregator
    """Aggregated errors of the whole run"""

    dry_run: bool = False
    """Report what would be copied without touching the filesystem"""

    target_path: str = ""
    """Destination root; empty until the first target directive"""

    filters: FilterSet = field(default_factory=FilterSet)
    """Active filter snapshot"""

    counts: BackupCounts = field(default_factory=BackupCounts)
    """Counters of the current source argument"""

    def reset_counts(self) -> None:
        self.counts = BackupCounts()

    @property
    def stopped(self) -> bool:
        """Whether the run must stop because of too many errors."""
        return self.errors.aborted
