"""Public observability primitives: JSON-lines logging and structlog routing."""

from cargo_orders.observability.logging import (
    LOG_FILENAME,
    ROOT_LOGGER_NAME,
    JsonLineFormatter,
    LoggingConfig,
    LoggingSession,
    active_session,
    configure_structlog,
    correlation_scope,
    get_correlation_context,
    get_logger,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "JsonLineFormatter",
    "LOG_FILENAME",
    "LoggingConfig",
    "LoggingSession",
    "ROOT_LOGGER_NAME",
    "active_session",
    "configure_structlog",
    "correlation_scope",
    "get_correlation_context",
    "get_logger",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
