"""Logging configuration for pdf-ingest."""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional

from pdf_ingest.config import LogFormat, get_settings

# Run ID context variable for correlating log lines of one ingestion run
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

_STANDARD_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
    "extra_fields",
    "run_id",
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        run_id = run_id_var.get()
        if run_id:
            log_data["run_id"] = run_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Human-readable formatter."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with run ID."""
        if not hasattr(record, "run_id"):
            record.run_id = run_id_var.get() or "-"
        return super().format(record)


def setup_logging(level: Optional[str] = None, log_format: Optional[LogFormat] = None) -> logging.Logger:
    """
    Configure the ``pdf_ingest`` logger.

    Safe to call more than once; handlers are replaced, not duplicated.

    Args:
        level: Log level name (defaults to settings.log_level)
        log_format: text or json (defaults to settings.log_format)
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    logger = logging.getLogger("pdf_ingest")
    logger.setLevel(getattr(logging, level))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, level))
    if log_format == LogFormat.JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(StandardFormatter())
    logger.addHandler(handler)

    # Third-party libraries are chatty at INFO
    noisy_level = logging.INFO if level == "DEBUG" else logging.WARNING
    for name in ("httpx", "httpcore", "qdrant_client", "fastembed"):
        logging.getLogger(name).setLevel(noisy_level)

    logger.propagate = False
    logger.debug(f"Logging configured: level={level}, format={log_format.value}")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance."""
    if name:
        return logging.getLogger(f"pdf_ingest.{name}")
    return logging.getLogger("pdf_ingest")


def set_run_id(run_id: str) -> None:
    """Set the run ID for the current context."""
    run_id_var.set(run_id)


def get_run_id() -> Optional[str]:
    """Get the current run ID."""
    return run_id_var.get()


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> None:
    """Log an error with context."""
    logger = get_logger("error")
    extra_fields = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
        **kwargs,
    }
    details = getattr(error, "details", None)
    if details:
        extra_fields["details"] = details
    logger.error(
        f"Error: {type(error).__name__}: {str(error)}",
        extra={"extra_fields": extra_fields},
    )
