"""structlog setup for the search pipeline and its entry points.

Logs are written to stderr (the search CLI prints SMS replies on stdout) as
JSON in production or colored key/value lines during development. Request
context such as correlation_id and tenant travels in contextvars, so log
entries emitted on executor threads carry it too.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Final

import structlog
from structlog.types import EventDict, Processor

APP_NAME: Final[str] = "campus_event_search"

QUIET_LIBRARY_LOGGERS: Final[tuple[str, ...]] = (
    "httpx",
    "httpcore",
    "openai",
    "pinecone",
    "urllib3",
)
"""SDK loggers that only log at WARNING and above."""


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["app"] = APP_NAME
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        json_logs: If True, output JSON (production); otherwise console lines

    Example:
        >>> setup_logging(log_level="WARNING")  # search CLI default
        >>> setup_logging(log_level="INFO", json_logs=True)  # log shipping
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    for name in QUIET_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger with context binding support

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("search_completed", tenant="uncchapelhill", results=3)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


@contextmanager
def bound_context(**kwargs: Any) -> Iterator[None]:
    """Bind context variables for log entries emitted inside the block.

    Keys already bound by an enclosing block get their previous values back
    on exit, so nested scopes can share a key.

    Example:
        >>> with bound_context(correlation_id="abc123", tenant="uncchapelhill"):
        ...     logger.info("search_started")  # Will include correlation_id and tenant
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield
