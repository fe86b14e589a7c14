"""Tests for FilterSet and exclude pattern parsing."""

import re
from datetime import datetime, timedelta

import pytest

from localbackup.sync.filters import FilterSet, parse_patterns


class TestParsePatterns:
    """Tests for parse_patterns function."""

    def test_splits_on_double_comma(self):
        """Test that patterns are separated by ',,'."""
        patterns, errors = parse_patterns(r"\.tmp$,,/cache/")

        assert [p.pattern for p in patterns] == [r"\.tmp$", "/cache/"]
        assert errors == []

    def test_single_comma_is_part_of_pattern(self):
        """Test that a single comma does not split."""
        patterns, _ = parse_patterns("a{1,3}")
        assert [p.pattern for p in patterns] == ["a{1,3}"]

    def test_skips_empty_pieces(self):
        """Test that empty pieces between delimiters are ignored."""
        patterns, errors = parse_patterns("f5,,,,/d6/,,")

        assert [p.pattern for p in patterns] == ["f5", "/d6/"]
        assert errors == []

    @pytest.mark.parametrize("arg", ["", "   ", "\t"])
    def test_blank_argument_yields_nothing(self, arg):
        """Test that a blank argument yields no patterns and no errors."""
        assert parse_patterns(arg) == ([], [])

    def test_invalid_regexp_is_reported_and_skipped(self):
        """Test that a broken regexp becomes an error message."""
        patterns, errors = parse_patterns("(notclosed,,ok")

        assert [p.pattern for p in patterns] == ["ok"]
        assert errors == ["Error in exclude regexp: (notclosed"]


class TestFilterSetExcludes:
    """Tests for replacing and extending exclusions."""

    def _compile(self, *patterns):
        return [re.compile(p) for p in patterns]

    def test_default_excludes_nothing(self):
        """Test that the default filter set has no exclusions."""
        filters = FilterSet()
        assert filters.exclude == ()
        assert not filters.is_excluded("/any/path")

    def test_replace_then_extend_keeps_both(self):
        """Test that extend appends to the replaced set."""
        filters = FilterSet().replace_excludes(self._compile(r"\.log$"))
        filters = filters.extend_excludes(self._compile(r"\.tmp$"))

        assert [p.pattern for p in filters.exclude] == [r"\.log$", r"\.tmp$"]
        assert filters.is_excluded("/a/b.log")
        assert filters.is_excluded("/a/b.tmp")

    def test_second_replace_drops_first(self):
        """Test that a second replace discards earlier patterns."""
        filters = FilterSet().replace_excludes(self._compile(r"\.log$"))
        filters = filters.replace_excludes(self._compile(r"\.tmp$"))

        assert [p.pattern for p in filters.exclude] == [r"\.tmp$"]
        assert not filters.is_excluded("/a/b.log")

    def test_clear_excludes(self):
        """Test clearing all exclusions."""
        filters = FilterSet().replace_excludes(self._compile("x", "y"))
        assert filters.clear_excludes().exclude == ()

    def test_snapshots_are_independent(self):
        """Test that deriving a snapshot leaves the original untouched."""
        original = FilterSet().replace_excludes(self._compile("a"))
        derived = original.extend_excludes(self._compile("b"))

        assert len(original.exclude) == 1
        assert len(derived.exclude) == 2

    def test_patterns_match_anywhere(self):
        """Test that patterns are searched, not anchored."""
        filters = FilterSet().replace_excludes(self._compile("middle"))
        assert filters.is_excluded("/d7/d_has_middle_part/f1")


class TestFilterSetLimits:
    """Tests for age and size limits."""

    def test_no_limits_by_default(self):
        """Test that nothing is too old or too large by default."""
        filters = FilterSet()
        assert not filters.is_too_large(10**15)
        assert not filters.is_too_old(0.0)

    def test_max_size(self):
        """Test that only files above max size are too large."""
        filters = FilterSet().with_max_size(150)

        assert filters.is_too_large(200)
        assert not filters.is_too_large(150)
        assert not filters.is_too_large(100)

    def test_start_date(self):
        """Test that files modified strictly before the start date are old."""
        start = datetime.now().astimezone() - timedelta(days=20)
        filters = FilterSet().with_start_date(start)

        assert filters.is_too_old((start - timedelta(days=10)).timestamp())
        assert not filters.is_too_old(start.timestamp())
        assert not filters.is_too_old((start + timedelta(days=10)).timestamp())

    def test_limits_keep_excludes(self):
        """Test that setting limits keeps the exclusions."""
        filters = FilterSet().replace_excludes([re.compile("x")])
        filters = filters.with_max_size(10).with_start_date(datetime.now().astimezone())

        assert [p.pattern for p in filters.exclude] == ["x"]
