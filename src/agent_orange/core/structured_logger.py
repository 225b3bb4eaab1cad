"""
Structured Logging with Trace IDs
=================================

JSON-structured logging for entry points (HTTP requests, relay commands,
CLI actions). A trace id set with TraceContext is attached to every entry
emitted while the context is active, so one approval can be followed from
request creation through notification dispatch.
"""

import json
import logging
import re
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path

# Context variable to store trace_id for current request
_trace_id_var: ContextVar[str | None] = ContextVar('trace_id', default=None)

_SECRET_PATTERNS = re.compile(
    r"(bot\d+:[A-Za-z0-9_-]+|\d{6,}:[A-Za-z0-9_-]{30,}|"
    r"Atza\|[A-Za-z0-9._~+/=|-]+|Atc\|[A-Za-z0-9._~+/=|-]+|"
    r"Bearer\s+[A-Za-z0-9._~+/=|-]+)",
    re.IGNORECASE,
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _redact_secrets(text: str) -> str:
    return _SECRET_PATTERNS.sub("[REDACTED]", text)


def current_trace_id() -> str | None:
    return _trace_id_var.get()


class StructuredLogger:
    """
    Structured logger that outputs JSON logs with trace IDs

    Example output:
    {
        "timestamp": "2026-03-01T10:30:45.123Z",
        "level": "INFO",
        "trace_id": "abc123",
        "component": "ApprovalService",
        "message": "Request created",
        "request_id": "5f0c...",
        "tool_name": "Bash"
    }
    """

    def __init__(self, component: str, logger: logging.Logger | None = None) -> None:
        self.component = component
        self.logger = logger or logging.getLogger(f"agent_orange.{component}")

    def _log(self, level: str, message: str, **kwargs) -> None:
        trace_id = _trace_id_var.get()

        log_entry = {
            'timestamp': datetime.now(tz=UTC).isoformat(),
            'level': level,
            'component': self.component,
            'message': _redact_secrets(message),
        }

        if trace_id:
            log_entry['trace_id'] = trace_id

        for k, v in kwargs.items():
            log_entry[k] = _redact_secrets(v) if isinstance(v, str) else v

        json_log = _redact_secrets(json.dumps(log_entry, default=str))

        log_method = getattr(self.logger, level.lower())
        log_method(json_log)

    def debug(self, message: str, **kwargs) -> None:
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log('ERROR', message, **kwargs)

    def critical(self, message: str, **kwargs) -> None:
        self._log('CRITICAL', message, **kwargs)


class TraceContext:
    """
    Context manager for setting trace_id for a request

    Usage:
        with TraceContext() as trace_id:
            # All structured logs within this context include this trace_id
            logger.info("Processing request")
    """

    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or self._generate_trace_id()
        self.token = None

    def __enter__(self) -> str:
        self.token = _trace_id_var.set(self.trace_id)
        return self.trace_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _trace_id_var.reset(self.token)

    @staticmethod
    def _generate_trace_id() -> str:
        return str(uuid.uuid4())[:8]


class RedactingFormatter(logging.Formatter):
    """Formatter that scrubs credentials from plain ``logging`` records too."""

    def format(self, record: logging.LogRecord) -> str:
        return _redact_secrets(super().format(record))


def setup_logging(level: str = "INFO", output_file: Path | None = None) -> None:
    """Configure the root logger once for CLI entry points."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if output_file is not None:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(output_file))

    formatter = RedactingFormatter(_TEXT_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=True)
    # httpx logs every request URL at INFO, which includes per-session endpoints
    logging.getLogger("httpx").setLevel(logging.WARNING)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def get_logger(component: str) -> StructuredLogger:
    """
    Get a structured logger for a component

    Args:
        component: Component name

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(component)
