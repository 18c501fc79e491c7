"""
Structured Logging Configuration for the Validation Engine

Configures structlog over the standard library logging module so that every
component logs keyword-argument events rendered as JSON (or as colourless console
lines in development and testing).

Request correlation is carried through structlog.contextvars: the logging stage of
the request pipeline binds ``request_id``, ``channel`` and ``sender_id`` for the
duration of a channel call, and merge_contextvars injects them into every event
emitted by downstream stages, the processor registry and the processors.
"""

import logging
import logging.config
import uuid
from typing import Any, Dict, Optional

import structlog

APPLICATION_NAME = "validation-engine"


def generate_request_id() -> str:
    """Generate a unique identifier for one channel call."""
    return uuid.uuid4().hex[:16]


def setup_structured_logging(config: Optional[Any] = None) -> structlog.stdlib.BoundLogger:
    """
    Setup structured logging for the engine.

    Args:
        config: Optional configuration object providing LOG_LEVEL and LOG_FORMAT

    Returns:
        Configured structured logger instance
    """
    log_level = getattr(config, "LOG_LEVEL", "INFO")
    log_format = getattr(config, "LOG_FORMAT", "json")

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }
    logging.config.dictConfig(logging_config)

    logger = structlog.get_logger(APPLICATION_NAME)
    logger.info(
        "Structured logging initialized",
        log_level=log_level,
        log_format=log_format,
    )
    return logger


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance with optional name.

    Args:
        name: Logger name, defaults to application name

    Returns:
        Structured logger
    """
    return structlog.get_logger(name or APPLICATION_NAME)


__all__ = [
    "APPLICATION_NAME",
    "generate_request_id",
    "setup_structured_logging",
    "get_logger",
]
