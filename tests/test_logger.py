"""
Tests for logger functionality.
"""

import pytest
from relatedposts.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(name="test", level="INFO", log_dir=tmp_path, enable_console=False)

        assert logger.logger.name == "test"
        assert logger.metrics["rankings_computed"] == 0

    def test_log_methods(self, tmp_path):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_log_with_context(self, tmp_path):
        """Context kwargs are appended as JSON."""
        logger = StructuredLogger(name="test-context", log_dir=tmp_path, enable_console=False)

        logger.info("Ranked", id="北京", count=5)

        content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert 'Ranked | Context: {"id": "北京", "count": 5}' in content

    def test_ranking_metrics(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_ranking(scored=10, restricted=2, fallback_used=True)
        logger.record_ranking(scored=4, restricted=0, fallback_used=False)
        metrics = logger.get_metrics()

        assert metrics["rankings_computed"] == 2
        assert metrics["candidates_scored"] == 14
        assert metrics["restricted_skipped"] == 2
        assert metrics["fallback_fills"] == 1
        assert metrics["fallback_rate"] == pytest.approx(0.5)

    def test_fetch_metrics(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.record_fetch_attempt()
        logger.record_fetch_failure("Timeout")
        logger.record_fetch_failure("Timeout")

        metrics = logger.get_metrics()
        assert metrics["fetch_attempts"] == 1
        assert metrics["fetch_failures"] == 2
        assert metrics["errors_by_type"] == {"Timeout": 2}

    def test_get_metrics_is_a_copy(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)
        logger.get_metrics()["errors_by_type"]["x"] = 1
        assert logger.metrics["errors_by_type"] == {}

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test-summary", log_dir=tmp_path, enable_console=False)
        logger.record_ranking(scored=3, restricted=1, fallback_used=True)
        logger.record_malformed_timestamp()

        logger.log_metrics_summary()

        content = next(tmp_path.glob("*.log")).read_text(encoding="utf-8")
        assert "Rankings: 1 (3 candidates scored)" in content
        assert "Malformed timestamps: 1" in content

    def test_log_file_creation(self, tmp_path):
        """Log file should be created in specified directory."""
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_console=False)

        logger.info("Test message")

        log_files = list(tmp_path.glob("*.log"))
        assert len(log_files) == 1
        assert "Test message" in log_files[0].read_text()

    def test_no_file_when_disabled(self, tmp_path):
        logger = StructuredLogger(name="test", log_dir=tmp_path, enable_file=False, enable_console=False)
        logger.info("Nothing on disk")
        assert list(tmp_path.glob("*.log")) == []


class TestGlobalLogger:
    """Test global logger singleton."""

    def test_get_logger_singleton(self, tmp_path):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2
        reset_logger()

    def test_reset_logger(self, tmp_path):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(log_dir=tmp_path, enable_console=False)
        logger1.record_fetch_attempt()

        reset_logger()

        logger2 = get_logger(log_dir=tmp_path, enable_console=False)
        assert logger2.metrics["fetch_attempts"] == 0
        reset_logger()

    def test_level_from_env(self, monkeypatch):
        reset_logger()
        monkeypatch.setenv("RELATEDPOSTS_LOG_LEVEL", "DEBUG")
        monkeypatch.delenv("RELATEDPOSTS_LOG_DIR", raising=False)

        logger = get_logger(enable_console=False)

        assert logger.logger.level == 10
        assert logger.logger.handlers == []
        reset_logger()
