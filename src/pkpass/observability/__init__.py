"""Observability module for pkpass.

Structured logging for archive reads, writes and signature checks:
- JSON output for production, colored console output for development
- Context binding (e.g. the archive path) through structlog contextvars
- Redaction of sensitive values such as passwords and tokens

Example:
    >>> from pkpass.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("pkpass.write.completed", entries=3, signed=True)
"""

from pkpass.observability.logging import (
    configure_logging,
    get_logger,
    is_debug_mode,
    log_context,
    sanitize_for_logging,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "log_context",
    "sanitize_for_logging",
]
