"""Output formatting for backup runs."""

import sys
from typing import Optional, TextIO

from rich.console import Console


class OutputFormatter:
    """Writes backup progress and results to a text sink.

    Paths, summaries and the error report are written to the console's
    file as-is, because rich rendering expands tabs and strips control
    characters that may legitimately appear in file names. Warnings and
    fatal errors go through rich and are colored on a terminal.
    """

    def __init__(self, file: Optional[TextIO] = None, quiet: bool = False):
        """Initialize output formatter.

        Args:
            file: Text sink to write to (defaults to stdout)
            quiet: Suppress echoed settings and other informational lines
        """
        self.quiet = quiet
        self.console = Console(
            file=file if file is not None else sys.stdout,
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )

    def print(self, text: str = "", end: str = "\n") -> None:
        """Print text verbatim."""
        self.console.file.write(text + end)
        self.console.file.flush()

    def info(self, text: str) -> None:
        """Print an informational line unless quiet."""
        if not self.quiet:
            self.print(text)

    def warning(self, text: str) -> None:
        """Print a warning."""
        self.console.print(f"WARN: {text}", style="yellow")

    def error(self, text: str) -> None:
        """Print an error."""
        self.console.print(text, style="red")

    def fatal(self, text: str) -> None:
        """Print a fatal error that stops the run."""
        self.console.print(f"FATAL: {text}", style="bold red")

    def progress_tick(self) -> None:
        """Print one progress marker without a line break."""
        self.print(".", end="")
