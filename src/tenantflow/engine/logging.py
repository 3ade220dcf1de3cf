"""
Structured logging for the tenant configuration engine.

Configured once by ``setup_logging()``; modules log through
``structlog.get_logger(__name__)``. Writes run inside ``tenant_log_context``
so every event they emit carries the tenant id.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from tenantflow.engine.settings import get_settings


def setup_logging() -> None:
    """Configure structlog from the observability settings."""
    settings = get_settings()
    observability = settings.observability

    logging.basicConfig(format="%(message)s", level=observability.log_level.value)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if observability.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def tenant_log_context(tenant_id: str) -> Iterator[None]:
    """Bind ``tenant_id`` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(tenant_id=tenant_id):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
