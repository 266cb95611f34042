"""Structured logging configuration for mini-s3."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.typing import FilteringBoundLogger, Processor

from mini_s3.infrastructure.config import Config, get_config


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add service name to log entries."""
    event_dict["service"] = "mini_s3"
    return event_dict


def setup_logging(config: Config | None = None) -> FilteringBoundLogger:
    """Configure structured logging.

    Logs go to stderr so command output on stdout stays clean.

    Args:
        config: Configuration to read level and format from.

    Returns:
        The root bound logger.
    """
    config = config or get_config()
    level = getattr(logging, config.observability.log_level.upper(), logging.WARNING)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_service_context,
    ]

    if config.observability.log_format == "json":
        processors: list[Processor] = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: str | None = None, **initial_context: Any) -> FilteringBoundLogger:
    """Get a bound logger instance."""
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
