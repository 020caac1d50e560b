"""Structured logging configuration for mcpcore.

This module configures structlog for structured logging with support for
both development (console) and production (JSON) output formats.

Log records are written to stderr: the stdio transport owns stdout, and a
stray log line there would corrupt the JSON-RPC stream.

Environment Variables:
    MCPCORE_LOG_FORMAT: Set to "json" for JSON output, "console" for colored output
    MCPCORE_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR)
    MCPCORE_SERVICE_NAME: Service name to include in logs
    MCPCORE_DEBUG: Set to "true" or "1" to expose exception details to clients

Example:
    >>> from mcpcore.observability.logging import get_logger, configure_logging
    >>>
    >>> configure_logging(log_format="json", log_level="INFO")
    >>> logger = get_logger("mcpcore.dispatcher")
    >>> logger.info("mcp.request.received", method="tools/list")
"""

import logging
import os
import sys
from collections.abc import Iterable
from typing import Any

import structlog
from structlog.typing import Processor

# Default configuration
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "mcpcore"

# Environment variable names
ENV_LOG_FORMAT = "MCPCORE_LOG_FORMAT"
ENV_LOG_LEVEL = "MCPCORE_LOG_LEVEL"
ENV_SERVICE_NAME = "MCPCORE_SERVICE_NAME"
ENV_DEBUG = "MCPCORE_DEBUG"

# Placeholder for redacted sensitive values in logs
REDACTED_PLACEHOLDER = "[REDACTED]"

# Key substrings (case-insensitive) that indicate sensitive data to redact
SENSITIVE_KEY_PATTERNS = frozenset({"password", "token", "secret", "key", "auth", "credential"})

_TRUTHY = ("true", "1", "yes", "on")

# Module-level flag to track if logging has been configured
_logging_configured = False


def _is_sensitive_key(key: str, patterns: Iterable[str]) -> bool:
    lower = str(key).lower()
    return any(pattern in lower for pattern in patterns)


def sanitize_for_logging(
    data: dict[str, Any],
    placeholder: str = REDACTED_PLACEHOLDER,
    patterns: Iterable[str] = SENSITIVE_KEY_PATTERNS,
) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive field values redacted.

    Keys containing (case-insensitive) any of ``patterns`` have their values
    replaced with ``placeholder``. Nested dicts and lists of dicts are
    sanitized recursively. The input is never modified.

    Args:
        data: The dict to sanitize (e.g. request params).
        placeholder: Replacement value for sensitive fields.
        patterns: Key substrings considered sensitive.

    Returns:
        A new dict safe to pass to a logger.

    Example:
        >>> sanitize_for_logging({"user": "alice", "password": "secret123"})
        {'user': 'alice', 'password': '[REDACTED]'}
        >>> sanitize_for_logging({"nested": {"API_TOKEN": "sk_live_abc"}})
        {'nested': {'API_TOKEN': '[REDACTED]'}}
    """
    if not data:
        return {}
    patterns = tuple(patterns)
    result: dict[str, Any] = {}
    for k, v in data.items():
        if _is_sensitive_key(k, patterns):
            result[k] = placeholder
        elif isinstance(v, dict):
            result[k] = sanitize_for_logging(v, placeholder, patterns)
        elif isinstance(v, list):
            result[k] = [
                sanitize_for_logging(item, placeholder, patterns) if isinstance(item, dict) else item
                for item in v
            ]
        else:
            result[k] = v
    return result


def is_debug_mode() -> bool:
    """Return True if MCPCORE_DEBUG is set to a truthy value (e.g. true, 1)."""
    value = os.environ.get(ENV_DEBUG, "").strip().lower()
    return value in _TRUTHY


def _get_log_level() -> str:
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_service_name() -> str:
    return os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)


def _get_shared_processors() -> list[Processor]:
    """Get shared processors for all log formats."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _get_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=False,
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_format: Output format - "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "INFO"
        service_name: Service name for log context. Defaults to env var or "mcpcore"
        force: If True, reconfigure even if already configured

    Example:
        >>> configure_logging(log_format="json", log_level="INFO")
        >>> configure_logging(log_format="console", log_level="DEBUG", force=True)
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = (log_level or _get_log_level()).upper()
    service_name = service_name or _get_service_name()

    shared_processors = _get_shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _get_renderer(log_format),
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    structlog.contextvars.bind_contextvars(service=service_name)

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given name.

    If logging has not been configured yet, it is configured with defaults.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("mcp.tool.executed", tool="echo")
    """
    if not _logging_configured:
        configure_logging()

    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent logs of this context.

    Example:
        >>> bind_context(request_id=7)
        >>> logger.info("event")  # includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
