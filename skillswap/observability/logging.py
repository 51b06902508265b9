"""
Logging configuration.

Routes, the CLI and the app factory log through structlog with key/value
fields; services and repositories use stdlib ``logging`` with %-style
messages. Both end up in one handler that renders JSON in production and
colored console lines elsewhere, with any bound context (request_id,
user_id) merged into every record.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from skillswap.config.settings import get_settings

_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "asyncpg")


def setup_logging() -> None:
    """
    Configure structlog and the root stdlib logger.

    Safe to call more than once; the root handler is replaced each time.

    Usage:
        setup_logging()
        structlog.get_logger(__name__).info("Skill score updated", user_id="u1", final_score=84)
        logging.getLogger(__name__).info("Credibility for %s: %d", "u1", 72)
    """
    settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_production:
        renderer: Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # foreign_pre_chain gives stdlib records the same fields as structlog events
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
    root.setLevel(settings.log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Attach fields (e.g. request_id) to every log record on this task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
