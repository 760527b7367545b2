"""
Structured logging for relatedposts.

Provides centralized logging with console and file outputs, log levels,
and counters for monitoring ranking runs and feed fetches.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json

from .env import get_log_dir, get_log_level


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for ranking calls and feed fetches.
    """

    def __init__(
        self,
        name: str = "relatedposts",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "rankings_computed": 0,
            "candidates_scored": 0,
            "restricted_skipped": 0,
            "fallback_fills": 0,
            "malformed_timestamps": 0,
            "fetch_attempts": 0,
            "fetch_failures": 0,
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"relatedposts_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, ensure_ascii=False)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_ranking(self, scored: int, restricted: int, fallback_used: bool):
        """Record one related-post ranking call."""
        self.metrics["rankings_computed"] += 1
        self.metrics["candidates_scored"] += scored
        self.metrics["restricted_skipped"] += restricted
        if fallback_used:
            self.metrics["fallback_fills"] += 1

    def record_malformed_timestamp(self):
        """Increment the unparsable publish timestamp counter."""
        self.metrics["malformed_timestamps"] += 1

    def record_fetch_attempt(self):
        """Increment feed fetch counter."""
        self.metrics["fetch_attempts"] += 1

    def record_fetch_failure(self, error_type: str):
        """Record a failed feed fetch."""
        self.metrics["fetch_failures"] += 1
        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = dict(self.metrics)
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        rankings = metrics_copy["rankings_computed"]
        if rankings > 0:
            metrics_copy["fallback_rate"] = round(metrics_copy["fallback_fills"] / rankings, 3)
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Ranking Session Metrics ===")
        self.info(f"Rankings: {metrics['rankings_computed']} ({metrics['candidates_scored']} candidates scored)")
        self.info(f"Restricted skipped: {metrics['restricted_skipped']}")
        if metrics["rankings_computed"]:
            self.info(f"Fallback fills: {metrics['fallback_fills']} ({metrics['fallback_rate'] * 100:.1f}%)")
        if metrics["malformed_timestamps"]:
            self.warning(f"Malformed timestamps: {metrics['malformed_timestamps']}")
        if metrics["fetch_attempts"]:
            self.info(f"Feed fetches: {metrics['fetch_attempts']} ({metrics['fetch_failures']} failed)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "relatedposts",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level; defaults to RELATEDPOSTS_LOG_LEVEL or INFO
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if "log_dir" not in kwargs:
            kwargs["log_dir"] = get_log_dir()
            kwargs.setdefault("enable_file", kwargs["log_dir"] is not None)
        _global_logger = StructuredLogger(name=name, level=level or get_log_level(), **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
