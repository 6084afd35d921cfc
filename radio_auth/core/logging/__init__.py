"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides JSON output for production and human-readable console output
for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion
- JSON/Console output based on environment
- Logger caching
"""

import logging

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting for production (when json_logs is true)
    4. Console formatting for development
    5. Standard library logger factory
    """
    logging.basicConfig(format="%(message)s", level=log_level.upper())

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
