"""Collection of non-fatal errors and the outcome of a backup run."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..output import OutputFormatter

logger = logging.getLogger(__name__)

TOO_MANY_ERRORS = "Quitting due to too many errors!"


class BackupStatus(str, Enum):
    """Overall outcome of a backup run."""

    OK = "ok"
    """All sources processed without errors"""

    NO_TARGET = "no_target"
    """A source appeared before any target; nothing was processed"""

    ERRORS = "errors"
    """At least one error was recorded"""


@dataclass
class BackupResult:
    """Outcome of a backup run."""

    status: BackupStatus
    """Overall outcome"""

    errors: list[str] = field(default_factory=list)
    """Recorded error messages, in order"""

    message: Optional[str] = None
    """Failure summary, e.g. "4 errors" (None on success)"""

    aborted: bool = False
    """Whether the run stopped early because of too many errors"""

    @property
    def success(self) -> bool:
        return self.status == BackupStatus.OK

    @property
    def error_count(self) -> int:
        return len(self.errors)


class ErrorAggregator:
    """Collects error messages for the end-of-run report.

    Once ``max_errors`` messages are recorded the aggregator is
    ``aborted``; callers check the flag and stop processing.
    """

    def __init__(self, output: OutputFormatter, max_errors: int = 100):
        self.output = output
        self.max_errors = max_errors
        self.messages: list[str] = []
        self.aborted = False

    def record(self, message: str) -> bool:
        """Record an error message.

        Returns:
            True if processing may continue, False if the run must stop
        """
        if self.aborted:
            return False
        logger.debug("Recorded error: %s", message)
        self.messages.append(message)
        if len(self.messages) >= self.max_errors:
            self.aborted = True
            self.output.error(TOO_MANY_ERRORS)
            logger.warning("Stopping after %d errors", len(self.messages))
            return False
        return True

    def report(self) -> None:
        """Print all recorded messages, if any."""
        if not self.messages:
            return
        self.output.print(f"\n{len(self.messages)} errors:")
        for message in self.messages:
            self.output.print(message)

    def result(self) -> BackupResult:
        if not self.messages:
            return BackupResult(status=BackupStatus.OK)
        return BackupResult(
            status=BackupStatus.ERRORS,
            errors=list(self.messages),
            message=f"{len(self.messages)} errors",
            aborted=self.aborted,
        )
