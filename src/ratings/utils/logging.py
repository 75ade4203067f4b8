"""Logging configuration for the Ratings domain."""

import logging
import os

import structlog


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    ``LOG_LEVEL`` and ``LOG_FORMAT`` (``console`` or ``json``) are read from the
    environment when not passed explicitly.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if os.environ.get("LOG_FORMAT", "console") == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=log_level, format="%(message)s")

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
