"""
Structured JSON logging with request and account tracing.

This module provides:
- JSON-formatted log output for machine parsing
- Request ID and account key propagation via contextvars (async-safe)
- Redaction of credential fields passed through extra={}
- Exception formatting with tracebacks

Usage:
    from src.utils.structured_logger import setup_structured_logging, get_logger, set_account

    setup_structured_logging()
    set_account("jane_example_com")
    logger = get_logger(__name__)
    logger.info("Login succeeded", extra={"streak": 3})
"""

import logging
import json
import sys
from datetime import datetime, timezone
from contextvars import ContextVar
from typing import Optional, Any, Dict


request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
account_var: ContextVar[Optional[str]] = ContextVar('account', default=None)

# Never written to a log line, whatever the caller passes in extra={}
REDACTED_FIELDS = {'password', 'secret', 'credentials', 'new_password'}
REDACTED = '***'


def set_request_id(request_id: str) -> None:
    """Set request ID for current context."""
    request_id_var.set(request_id)


def get_request_id() -> Optional[str]:
    """Get request ID for current context."""
    return request_id_var.get()


def clear_request_id() -> None:
    """Clear request ID for current context."""
    request_id_var.set(None)


def set_account(account: str) -> None:
    """Set the sanitized account key for current context."""
    account_var.set(account)


def get_account() -> Optional[str]:
    """Get the account key for current context."""
    return account_var.get()


def clear_account() -> None:
    """Clear the account key for current context."""
    account_var.set(None)


# Standard LogRecord attributes, excluded from the "extra" block
_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'taskName'
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    extra_fields = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key.startswith('_'):
            continue
        if key.lower() in REDACTED_FIELDS:
            extra_fields[key] = REDACTED
            continue
        # Ensure value is JSON serializable
        try:
            json.dumps(value)
            extra_fields[key] = value
        except (TypeError, ValueError):
            extra_fields[key] = str(value)
    return extra_fields


class JSONFormatter(logging.Formatter):
    """JSON log formatter with request_id and account injection.

    Formats log records as JSON with consistent structure:
    {
        "timestamp": "2024-01-21T15:30:00.123456Z",
        "level": "INFO",
        "logger": "module.name",
        "message": "Log message",
        "request_id": "abc-123",
        "account": "jane_example_com",
        "service": "streakguard",
        ...extra fields...
    }
    """

    def __init__(self, service_name: str = "streakguard"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
            "account": get_account(),
            "service": self.service_name,
        }

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = _extra_fields(record)
        if extra_fields:
            log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class PlainFormatter(logging.Formatter):
    """Plain text formatter for development.

    Format: timestamp - logger - level - [request_id] message
    """

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        request_id_str = f"[{request_id}] " if request_id else ""

        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')

        base_message = f"{timestamp} - {record.name} - {record.levelname} - {request_id_str}{record.getMessage()}"

        if record.exc_info:
            base_message += "\n" + self.formatException(record.exc_info)

        return base_message


def setup_structured_logging(
    level: str = "INFO",
    json_output: bool = True,
    service_name: str = "streakguard"
) -> None:
    """Configure logging for the application.

    Call once at startup, before any logging statements are executed.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use plain text
        service_name: Service name to include in log entries
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if json_output:
        handler.setFormatter(JSONFormatter(service_name=service_name))
    else:
        handler.setFormatter(PlainFormatter())

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically for __name__)."""
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """Log a message with additional context fields.

    Example:
        log_with_context(logger, logging.WARNING, "Account locked",
                         account="jane_example_com", failed_attempts=5)
    """
    logger.log(level, message, extra=context)
