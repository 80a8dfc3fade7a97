"""
Structured logging configuration using structlog.

JSON lines in production, coloured console output everywhere else.
Modules keep using logging.getLogger(__name__); their records are
rendered through structlog's ProcessorFormatter so both paths share
one output format. Scan-scoped fields (post_id, subreddit) are bound
with bind_context() and attached to every line until cleared.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from media_reliability.config.settings import get_settings


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structured logging for the bot.

    Args:
        level: Log level name, defaults to settings.log_level
        json_output: Force JSON rendering, defaults to settings.is_production

    Usage:
        setup_logging()
        logger = structlog.get_logger()
        logger.info("Report submitted", post_id="t3_abc", sources=2)
    """
    settings = get_settings()
    level = level or settings.log_level
    json_output = settings.is_production if json_output is None else json_output

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: Processor
    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib records (logging.getLogger(__name__)) through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger that accepts key-value fields."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """
    Attach fields such as post_id to every line logged in this context.

    Fields live in contextvars, so concurrent scans keep separate values.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every field added by bind_context()."""
    structlog.contextvars.clear_contextvars()
