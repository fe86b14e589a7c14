"""CLI interface for localbackup."""

import logging
from typing import Any, Optional

import click

from .config import config
from .exceptions import BackupConfigError
from .output import OutputFormatter
from .sync import BackupEngine

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("localbackup").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@click.command()
@click.argument("config_file", type=click.Path(dir_okay=False, allow_dash=True))
@click.option(
    "--dry-run", "-d", is_flag=True, help="Lists affected files without copying"
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many errors (default: 100)",
)
@click.option("--quiet", "-q", is_flag=True, help="Do not echo applied settings")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="localbackup")
@click.pass_context
def main(
    ctx: Any,
    config_file: str,
    dry_run: bool,
    max_errors: Optional[int],
    quiet: bool,
    verbose: bool,
) -> None:
    """Copy new and updated files listed in CONFIG_FILE to their target.

    CONFIG_FILE holds one directive or source path per line:

    \b
      # comment
      => /backup          target root for the following sources
      !@ 30               only files changed in the last 30 days
      !> 100000000        only files up to 100 MB
      ! \\.tmp$,,/cache/   replace exclude regexps (,, separated)
      !+ \\.bak$           add exclude regexps
      /home/user/docs     source file or directory

    Use "-" to read the configuration from standard input.
    """
    _configure_logging(verbose)
    out = OutputFormatter(quiet=quiet)

    try:
        settings = config.load().with_overrides(max_errors=max_errors)
    except BackupConfigError as e:
        out.error(f"Invalid settings: {e}")
        ctx.exit(1)

    try:
        with click.open_file(config_file, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        out.error(f"Cannot read config file: {e}")
        ctx.exit(1)

    engine = BackupEngine(output=out, settings=settings)
    try:
        result = engine.run(lines, dry_run=dry_run)
    except KeyboardInterrupt:
        out.warning("Backup interrupted by user")
        ctx.exit(130)  # Standard exit code for SIGINT

    if not result.success:
        logger.debug("Backup failed: %s", result.message)
        ctx.exit(1)


if __name__ == "__main__":
    main()
