"""Structured logging configuration using structlog."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import orjson
import structlog
from structlog.types import Processor

from settlement_workbench.core.config import settings

# Context variables for request/settlement correlation
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
settlement_no_ctx: ContextVar[str | None] = ContextVar("settlement_no", default=None)

_CORRELATION_VARS: dict[str, ContextVar[str | None]] = {
    "request_id": request_id_ctx,
    "settlement_no": settlement_no_ctx,
}


def _add_context_vars(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Copy correlation context variables onto the log event."""
    for key, var in _CORRELATION_VARS.items():
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def _orjson_serializer(obj: Any, **kwargs: Any) -> str:
    # Decimal amounts are not native to orjson; render them as strings.
    return orjson.dumps(obj, default=str).decode("utf-8")


@contextmanager
def settlement_context(settlement_no: str) -> Iterator[None]:
    """Tag every log event emitted inside the block with a settlement number.

    Args:
        settlement_no: Settlement document number, e.g. ``FBJS-2024-1025-001``.
    """
    token = settlement_no_ctx.set(settlement_no)
    try:
        yield
    finally:
        settlement_no_ctx.reset(token)


def _use_json_renderer() -> bool:
    log_format = settings.log_format.lower() if settings.log_format else None
    if log_format is not None:
        return log_format == "json"
    return settings.environment != "development"


def configure_logging() -> None:
    """Configure structlog for the application.

    Development mode renders colored console lines; every other environment
    (or ``LOG_FORMAT=json``) renders one JSON object per event via orjson.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_context_vars,
    ]

    if _use_json_renderer():
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.EventRenamer("message"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_serializer),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name, usually ``__name__``.

    Returns:
        Configured structlog bound logger.
    """
    return structlog.get_logger(name)
