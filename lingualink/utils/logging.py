"""
Structured logging configuration for the LinguaLink service.
Provides JSON-formatted logs with contextual information.
"""

import logging
import sys
from typing import Optional
import structlog
from structlog.stdlib import LoggerFactory
from pythonjsonlogger import jsonlogger
from lingualink.config import settings
import time
from contextvars import ContextVar

# Context variables for request tracking
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[int]] = ContextVar("user_id", default=None)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

# Keys that might carry conversation content
SENSITIVE_CONTENT_KEYS = (
    "text", "original_text", "translated_text", "transcript",
    "payload", "audio", "content",
)


def add_context_processor(logger, method_name, event_dict):
    """Add context variables to log entries."""
    request_id = request_id_var.get()
    user_id = user_id_var.get()
    session_id = session_id_var.get()

    if request_id:
        event_dict["request_id"] = request_id
    if user_id is not None:
        event_dict.setdefault("user_id", user_id)
    if session_id:
        event_dict.setdefault("session_id", session_id)

    event_dict["environment"] = settings.environment.value
    return event_dict


def add_timestamp(logger, method_name, event_dict):
    """Add timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def censor_sensitive_data(logger, method_name, event_dict):
    """Remove or mask sensitive data from logs."""
    if not settings.log_conversation_content:
        for key in SENSITIVE_CONTENT_KEYS:
            if key in event_dict:
                event_dict[key] = "[REDACTED]"

    # Always mask API keys, tokens and passwords
    for key in event_dict:
        if any(sensitive in key.lower() for sensitive in ["key", "token", "password", "secret"]):
            if isinstance(event_dict[key], str) and len(event_dict[key]) > 8:
                event_dict[key] = event_dict[key][:4] + "..." + event_dict[key][-4:]
            elif isinstance(event_dict[key], str):
                event_dict[key] = "***"

    return event_dict


def setup_logging():
    """Configure structured logging for the application."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    json_formatter = jsonlogger.JsonFormatter(
        fmt="%(timestamp)s %(level)s %(name)s %(message)s",
        rename_fields={"levelname": "level", "name": "logger"}
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(json_formatter)
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_context_processor,
            censor_sensitive_data,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self) -> structlog.BoundLogger:
        """Get a logger instance for this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

    def log_latency(self, operation: str, start_time: float, **kwargs):
        """Log the latency of an operation."""
        latency_ms = (time.time() - start_time) * 1000
        self.logger.info(
            f"{operation}_completed",
            latency_ms=latency_ms,
            **kwargs
        )

    def log_error(self, operation: str, error: BaseException, **kwargs):
        """Log an error with context."""
        self.logger.error(
            f"{operation}_failed",
            error_type=type(error).__name__,
            error_message=str(error),
            **kwargs
        )


# Initialize logging when module is imported
setup_logging()
