"""Observability module for structured logging."""

from lens.observability.logging import batch_log_context, configure_logging, get_logger


__all__ = [
    "batch_log_context",
    "configure_logging",
    "get_logger",
]
