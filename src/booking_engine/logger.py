"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Literal, Optional

import structlog
from structlog.typing import Processor


def setup_logging(
    level: str = "INFO",
    format_type: Literal["json", "console"] = "console",
) -> None:
    """
    Configure structured logging for the booking engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_type: 'json' for machine-readable output, 'console' for development
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format_type == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stdout,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance.

    Args:
        name: Optional logger name (usually module name)
    """
    return structlog.get_logger(name)
