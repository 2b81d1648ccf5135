"""
Structured logging system for mission control.

Provides centralized logging with console and file outputs, log levels,
and request metrics for monitoring the job store handlers.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .env import get_log_dir, get_log_level


def _resolve_level(level: str) -> int:
    """Map a level name to its number; unknown names fall back to INFO."""
    value = getattr(logging, str(level).upper(), None)
    return value if isinstance(value, int) else logging.INFO


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks request and failure counts per operation.
    """

    def __init__(
        self,
        name: str = "missioncontrol",
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
            enable_console: Output logs to console (stderr)
        """
        self.logger = logging.getLogger(name)
        log_level = _resolve_level(level)
        self.logger.setLevel(log_level)
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = False

        self.metrics = {
            "requests": 0,
            "failures": 0,
            "requests_by_method": {},
            "errors_by_code": {},
        }

        # Console goes to stderr so CLI output on stdout stays parseable
        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
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

            log_file = log_dir / f"missioncontrol_{datetime.now().strftime('%Y%m%d')}.log"
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

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_request(self, method: str):
        """Count an invocation of an operation."""
        self.metrics["requests"] += 1
        by_method = self.metrics["requests_by_method"]
        by_method[method] = by_method.get(method, 0) + 1

    def record_failure(self, method: str, code: str):
        """Count a failed invocation by error code."""
        self.metrics["failures"] += 1
        by_code = self.metrics["errors_by_code"]
        by_code[code] = by_code.get(code, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = dict(self.metrics)
        metrics_copy["requests_by_method"] = dict(self.metrics["requests_by_method"])
        metrics_copy["errors_by_code"] = dict(self.metrics["errors_by_code"])
        total = metrics_copy["requests"]
        metrics_copy["failure_rate"] = (
            round(metrics_copy["failures"] / total, 3) if total else 0.0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Mission Control Metrics ===")
        self.info(
            f"Requests: {metrics['requests']} "
            f"({metrics['failures']} failed, {metrics['failure_rate'] * 100:.1f}%)"
        )

        if metrics["requests_by_method"]:
            self.info("Requests by method:")
            for method, count in metrics["requests_by_method"].items():
                self.info(f"  {method}: {count}")

        if metrics["errors_by_code"]:
            self.info("Error codes:")
            for code, count in metrics["errors_by_code"].items():
                self.info(f"  {code}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "missioncontrol", **kwargs) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level and file output come from MISSION_CONTROL_LOG_LEVEL and
    MISSION_CONTROL_LOG_DIR unless passed explicitly.

    Args:
        name: Logger name
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        kwargs.setdefault("level", get_log_level())
        if "log_dir" not in kwargs and "enable_file" not in kwargs:
            log_dir = get_log_dir()
            kwargs["log_dir"] = log_dir
            kwargs["enable_file"] = log_dir is not None
        _global_logger = StructuredLogger(name=name, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
