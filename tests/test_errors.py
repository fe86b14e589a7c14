"""Tests for error aggregation and output formatting."""

from localbackup.output import OutputFormatter
from localbackup.sync.errors import TOO_MANY_ERRORS, BackupStatus, ErrorAggregator


class TestErrorAggregator:
    """Tests for ErrorAggregator."""

    def test_no_errors(self, output, buffer):
        """Test a clean run."""
        errors = ErrorAggregator(output)

        errors.report()
        result = errors.result()

        assert buffer.getvalue() == ""
        assert result.success
        assert result.errors == []

    def test_report_lists_messages_in_order(self, output, buffer):
        """Test the end-of-run report."""
        errors = ErrorAggregator(output)
        assert errors.record("first") is True
        assert errors.record("second") is True

        errors.report()

        assert buffer.getvalue() == "\n2 errors:\nfirst\nsecond\n"
        assert errors.result().message == "2 errors"

    def test_aborts_at_limit(self, output, buffer):
        """Test that reaching max_errors sets the abort flag once."""
        errors = ErrorAggregator(output, max_errors=2)

        assert errors.record("one") is True
        assert errors.record("two") is False
        assert errors.aborted
        assert errors.record("three") is False

        result = errors.result()
        assert result.status == BackupStatus.ERRORS
        assert result.errors == ["one", "two"]
        assert result.aborted
        assert buffer.getvalue().count(TOO_MANY_ERRORS) == 1


class TestOutputFormatter:
    """Tests for OutputFormatter."""

    def test_prefixes(self, output, buffer):
        """Test warning and fatal prefixes."""
        output.warning("careful")
        output.fatal("stop")

        assert buffer.getvalue() == "WARN: careful\nFATAL: stop\n"

    def test_quiet_suppresses_info_only(self, buffer):
        """Test that quiet mode keeps errors and plain prints."""
        out = OutputFormatter(file=buffer, quiet=True)
        out.info("target /backup")
        out.error("Cannot stat, skipping: /x")
        out.print("Dirs: 1, Files: 1, Copied: 1")

        assert buffer.getvalue() == (
            "Cannot stat, skipping: /x\nDirs: 1, Files: 1, Copied: 1\n"
        )

    def test_paths_print_verbatim(self, output, buffer):
        """Test that brackets and colons are not treated as markup."""
        output.print("/data/[old]/:smile:/file")

        assert buffer.getvalue() == "/data/[old]/:smile:/file\n"

    def test_tabs_are_kept(self, output, buffer):
        """Test that a tab in a file name is not expanded to spaces."""
        output.print("/a\tb/c")
        output.print("\n/src\tdir")

        assert buffer.getvalue() == "/a\tb/c\n\n/src\tdir\n"
