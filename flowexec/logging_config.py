"""Structured logging setup shared by the API server and the CLI."""

import logging
from typing import TextIO

import structlog

from flowexec.config import Settings


def configure_logging(settings: Settings, file: TextIO | None = None) -> None:
    """Configure structlog from settings.

    JSON lines in production, a console renderer when ``debug`` is set.
    Logs go to ``file`` (stdout by default).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer() if not settings.debug else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=file),
        cache_logger_on_first_use=True,
    )
