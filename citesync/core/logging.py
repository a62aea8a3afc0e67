"""Structured logging configuration.

Features:
- JSON-formatted log output in production and staging
- Human-readable console output elsewhere
- Service, environment and document namespace on every entry

Logging is configured once per process by the composition root
(``CitationSession(setup_logging=True)``); library code only calls
``get_logger``.
"""

import logging
import sys
from typing import Any, Callable

import structlog
from structlog.types import Processor

from citesync.core.config import Settings, get_settings


_JSON_ENVIRONMENTS = ("production", "staging")

_configured = False

EventDict = dict[str, Any]


def make_service_context(
    settings: Settings,
) -> Callable[[Any, str, EventDict], EventDict]:
    """Build a processor stamping entries with the given settings' context.

    Args:
        settings: Settings of the session doing the logging.

    Returns:
        structlog processor adding service, environment and (when a
        storage namespace is configured) the document namespace.
    """
    service = settings.service_name
    environment = settings.environment
    document = settings.storage_namespace or None

    def add_service_context(
        logger: Any,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        if document is not None:
            event_dict.setdefault("document", document)
        return event_dict

    return add_service_context


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Settings | None = None, *, force: bool = False) -> bool:
    """Configure structlog and the standard library root logger.

    Args:
        settings: Settings to log with, get_settings() if omitted.
        force: Reconfigure even if logging was already set up.

    Returns:
        True if logging was (re)configured, False if it already was.
    """
    global _configured
    if _configured and not force:
        return False

    settings = settings or get_settings()
    level = _resolve_level(settings.log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        make_service_context(settings),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment in _JSON_ENVIRONMENTS:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    # Engine transport chatter
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    _configured = True
    return True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Citation registered", citation_id="CITATION-3", note_index=2)
        ```
    """
    return structlog.get_logger(name)


Logger = structlog.BoundLogger
