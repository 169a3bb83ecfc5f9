"""structlog-based logger setup."""

from __future__ import annotations

import logging
import sys

import structlog

from .config import LogSection


def new_logger(
    level: str = "INFO",
    format: str = "json",
    service: str = "payment-backend",
) -> structlog.stdlib.BoundLogger:
    """Configure structlog and return a logger bound to the service name.

    Args:
        level: log level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        format: output format ("json" or "text")
        service: value of the ``service`` key on every event

    Returns:
        a configured structlog.stdlib.BoundLogger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if format == "json":
        processors += [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.stdlib.get_logger().bind(service=service)


def logger_from_config(section: LogSection, service: str) -> structlog.stdlib.BoundLogger:
    """new_logger driven by the ``log`` section of the config file."""
    return new_logger(level=section.level, format=section.format, service=service)
