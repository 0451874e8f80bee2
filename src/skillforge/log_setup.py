"""structlog configuration driven by :class:`~skillforge.config.Settings`."""

import logging
import sys

import structlog

from skillforge.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog rendering and level filtering.

    Log lines go to stderr so command output on stdout stays machine readable.

    Args:
        settings: Application settings; ``log_format`` picks ``json`` or
            ``console`` output and ``log_level`` sets the minimum level.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer: structlog.types.Processor
    if settings.log_format.lower() == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
