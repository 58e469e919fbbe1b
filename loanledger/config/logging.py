"""
structlog setup for the ledger.

Every event carries the service name, version and environment. Development
gets a coloured console; other environments emit one JSON object per line.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from loanledger.config.settings import Settings, get_settings

# Third-party loggers that only add noise at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access")


def _service_context(settings: Settings) -> Processor:
    service = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def add_service_context(
        logger: Any, method_name: str, event_dict: EventDict
    ) -> EventDict:
        for key, value in service.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_service_context


def _renderers(json_output: bool) -> list[Processor]:
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger once per process."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _service_context(settings),
        *_renderers(settings.json_logs),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger."""
    return structlog.get_logger(name)
