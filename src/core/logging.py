"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__));
Logfire captures and enriches those records once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", service_id=12, task_id=40)
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="binday",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("plan_transition.change_plan"):
            ...
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (service_id, task_id, actor_id, ...)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)


def log_gateway_failure(
    logger: logging.Logger,
    operation: str,
    error: BaseException,
    **context: object,
) -> None:
    """Log a swallowed billing gateway failure.

    These records are the only trace of lag between local state and the
    billing provider, so they always carry the operation name and the ids
    needed to reconcile by hand.
    """
    log_with_context(
        logger,
        "error",
        "billing_gateway_failure",
        operation=operation,
        error=str(error) or type(error).__name__,
        error_type=type(error).__name__,
        **context,
    )
