"""Observability module for mcpcore.

Structured logging (structlog) with console output for development and JSON
output for production, plus helpers to keep secrets out of log records.

Example:
    >>> from mcpcore.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("mcp.request.received", method="tools/call")
"""

from mcpcore.observability.logging import (
    REDACTED_PLACEHOLDER,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)

__all__ = [
    "REDACTED_PLACEHOLDER",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "sanitize_for_logging",
]
