"""
structlog setup for the storefront API.

Local runs print colored key=value lines; production emits one JSON object
per line (non-ASCII kept as is, so Turkish customer names and messages
stay readable in the log viewer).

Usage:
    from core.logging import configure_logging, get_logger

    configure_logging(json_logs=settings.is_production)
    logger = get_logger(__name__)
    logger.info("Order created", order_number="NOW-2025-01-15-AB12CD")
"""

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor

# Raised to WARNING: every Supabase call logs its HTTP request at INFO
QUIET_LOGGERS = (
    "httpx",
    "httpcore",
    "hpack",
    "urllib3",
    "postgrest",
    "uvicorn.access",
)


def _processors(json_logs: bool) -> List[Processor]:
    processors: List[Processor] = [
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ))
    return processors


def configure_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_logs: JSON lines (production) instead of the console renderer.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
    """
    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging_from_settings(settings) -> None:
    """JSON logs in production; DEBUG level when settings.debug is on."""
    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """
    Attach key/values to every log line for the rest of the request.

    The tracing middleware binds request_id, method and path; order routes
    add order_id once it is known.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LoggerMixin:
    """Gives services a ``self.logger`` named after the class."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        return get_logger(type(self).__name__)
