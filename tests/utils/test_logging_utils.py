"""Tests for logging utilities."""

import logging

from migrate_packages.utils.logging_utils import (
    log_operation_start,
    log_operation_complete,
    format_count_with_unit,
    format_file_size,
    log_progress,
)


class TestLogOperations:
    """Tests for operation logging functions."""

    def test_log_operation_start_no_details(self, caplog):
        """Test logging operation start without details."""
        with caplog.at_level(logging.INFO):
            log_operation_start("package migration")
        assert "Starting package migration" in caplog.text

    def test_log_operation_start_with_details(self, caplog):
        """Test logging operation start with details."""
        with caplog.at_level(logging.INFO):
            log_operation_start("package migration", source="source-org", packages=5)
        assert "Starting package migration" in caplog.text
        assert "source=source-org" in caplog.text
        assert "packages=5" in caplog.text

    def test_log_operation_complete_with_details(self, caplog):
        """Test logging operation complete with details."""
        with caplog.at_level(logging.INFO):
            log_operation_complete("CSV export", packages=3)
        assert "Completed CSV export (packages=3)" in caplog.text


class TestFormatting:
    """Tests for formatting helpers."""

    def test_format_count_with_unit_singular(self):
        """Test singular form."""
        assert format_count_with_unit(1, "package") == "1 package"

    def test_format_count_with_unit_plural(self):
        """Test plural form."""
        assert format_count_with_unit(0, "version") == "0 versions"
        assert format_count_with_unit(5, "version") == "5 versions"

    def test_format_count_with_unit_explicit_singular(self):
        """Test explicit singular form."""
        assert format_count_with_unit(1, "entries", singular="entry") == "1 entry"

    def test_format_file_size(self):
        """Test human readable sizes."""
        assert format_file_size(0) == "0 B"
        assert format_file_size(500) == "500.0 B"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(256 * 1024 * 1024) == "256.0 MB"
        assert format_file_size(10 * 1024**3) == "10.0 GB"


class TestLogProgress:
    """Tests for log_progress."""

    def test_log_progress_at_interval(self, caplog):
        """Test progress is logged at the interval."""
        with caplog.at_level(logging.INFO):
            log_progress(10, 100, "Packages migrated")
        assert "Packages migrated: 10/100 (10.0%)" in caplog.text

    def test_log_progress_not_at_interval(self, caplog):
        """Test progress is not logged between intervals."""
        with caplog.at_level(logging.INFO):
            log_progress(7, 100, "Packages migrated")
        assert "Packages migrated" not in caplog.text

    def test_log_progress_at_completion(self, caplog):
        """Test progress is always logged at completion."""
        with caplog.at_level(logging.INFO):
            log_progress(3, 3, "Versions downloaded", interval=5)
        assert "Versions downloaded: 3/3 (100.0%)" in caplog.text
