"""
Tests for logger functionality.
"""

import pytest
from contactlink.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["api_calls"] == 0
        assert logger.metrics["errors_by_type"] == {}

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        # Should not raise exceptions
        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")

    def test_log_with_context(self, tmp_path):
        """Context is appended to the line as JSON."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Matched organization", company_id="101", score=0.9)

        content = next(tmp_path.glob("*.log")).read_text()
        assert 'Matched organization | Context: {"company_id": "101", "score": 0.9}' in content

    def test_contact_metrics(self, tmp_path):
        """Contact outcomes should be counted and bucketed by error code."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.record_api_call()
        logger.record_api_call()
        assert logger.metrics["api_calls"] == 2

        for _ in range(3):
            logger.record_contact_attempt()
        logger.record_contact_success()
        logger.record_contact_success()
        logger.record_contact_failure("USER_ALREADY_EXISTS")

        metrics = logger.get_metrics()

        assert metrics["contacts_attempted"] == 3
        assert metrics["contacts_created"] == 2
        assert metrics["contacts_failed"] == 1
        assert metrics["errors_by_type"]["USER_ALREADY_EXISTS"] == 1
        assert metrics["contact_success_rate"] == pytest.approx(0.667, rel=0.01)

    def test_search_metrics(self, tmp_path):
        """Match rate should follow recorded searches."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.get_metrics()["match_rate"] == 0

        logger.record_search(True)
        logger.record_search(False)

        metrics = logger.get_metrics()
        assert metrics["searches"] == 2
        assert metrics["matches_found"] == 1
        assert metrics["match_rate"] == 0.5

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )
        logger.record_contact_attempt()
        logger.record_contact_failure("NETWORK_ERROR")

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text()
        assert "Contacts: 0/1" in content
        assert "NETWORK_ERROR: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(
            name="test",
            log_dir=tmp_path,
            enable_console=False,
        )

        logger.info("Test message")

        # Check that a log file was created
        log_files = list(tmp_path.glob("contactlink_*.log"))
        assert len(log_files) == 1

        # Check that message was written
        log_content = log_files[0].read_text()
        assert "Test message" in log_content


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()  # Start fresh

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_api_call()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)

        # Should be different instance with fresh metrics
        assert logger2.metrics["api_calls"] == 0
