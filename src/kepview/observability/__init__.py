"""Public observability primitives: structured JSON-lines logging."""

from kepview.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    get_active_logger,
    get_active_logging_handle,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "get_active_logger",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
