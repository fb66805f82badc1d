"""
Structured logging system for ContactLink.

Provides centralized logging with console and file output, JSON context
on every line, and metrics tracking for CRM calls and contact creation.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for CRM usage and contact creation outcomes.
    """

    def __init__(
        self,
        name: str = "contactlink",
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
            "api_calls": 0,
            "contacts_attempted": 0,
            "contacts_created": 0,
            "contacts_failed": 0,
            "searches": 0,
            "matches_found": 0,
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
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

            log_file = log_dir / f"contactlink_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
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

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self):
        """Increment CRM API call counter."""
        self.metrics["api_calls"] += 1

    def record_search(self, matched: bool):
        """Record an organization lookup and whether it produced a match."""
        self.metrics["searches"] += 1
        if matched:
            self.metrics["matches_found"] += 1

    def record_contact_attempt(self):
        self.metrics["contacts_attempted"] += 1

    def record_contact_success(self):
        self.metrics["contacts_created"] += 1

    def record_contact_failure(self, error_type: str):
        """Record a failed contact creation, bucketed by error code."""
        self.metrics["contacts_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics with derived rates."""
        metrics_copy = dict(self.metrics)
        attempts = metrics_copy["contacts_attempted"]
        metrics_copy["contact_success_rate"] = (
            round(metrics_copy["contacts_created"] / attempts, 3) if attempts else 0
        )
        searches = metrics_copy["searches"]
        metrics_copy["match_rate"] = (
            round(metrics_copy["matches_found"] / searches, 3) if searches else 0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== ContactLink Session Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(
            f"Contacts: {metrics['contacts_created']}/{metrics['contacts_attempted']} "
            f"({metrics['contact_success_rate'] * 100:.1f}% success)"
        )
        self.info(
            f"Organization searches: {metrics['searches']} "
            f"({metrics['matches_found']} matched)"
        )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "contactlink",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
