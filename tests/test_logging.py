"""Tests for structured logging configuration."""

from decimal import Decimal

import orjson
import structlog

from settlement_workbench.core.config import settings
from settlement_workbench.core.logging import (
    _add_context_vars,
    _orjson_serializer,
    configure_logging,
    request_id_ctx,
    settlement_context,
    settlement_no_ctx,
)


def _reset_structlog() -> None:
    """Reset structlog defaults to avoid test cross-talk."""
    structlog.reset_defaults()


def test_configure_logging_uses_json_when_log_format_json() -> None:
    """Use JSON logging when log_format=json, even in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "json"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
        assert any(
            isinstance(processor, structlog.processors.EventRenamer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_configure_logging_uses_console_when_log_format_console() -> None:
    """Use console logging when log_format=console in development."""
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "development"
        settings.log_format = "console"
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.dev.ConsoleRenderer)
            for processor in processors
        )
        assert not any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_configure_logging_defaults_to_json_outside_development() -> None:
    original_env = settings.environment
    original_format = getattr(settings, "log_format", None)

    try:
        settings.environment = "production"
        settings.log_format = None
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert any(
            isinstance(processor, structlog.processors.JSONRenderer)
            for processor in processors
        )
    finally:
        settings.environment = original_env
        settings.log_format = original_format
        _reset_structlog()


def test_settlement_context_tags_events() -> None:
    """Events inside the block carry the settlement number."""
    with settlement_context("FBJS-2024-1025-001"):
        event = _add_context_vars(None, "info", {"event": "narrative_served"})
        assert event["settlement_no"] == "FBJS-2024-1025-001"

    assert settlement_no_ctx.get() is None
    assert "settlement_no" not in _add_context_vars(None, "info", {"event": "x"})


def test_context_vars_do_not_override_bound_values() -> None:
    token = request_id_ctx.set("req-1")
    try:
        event = _add_context_vars(None, "info", {"event": "x", "request_id": "explicit"})
    finally:
        request_id_ctx.reset(token)
    assert event["request_id"] == "explicit"


def test_orjson_serializer_renders_decimal_as_string() -> None:
    rendered = _orjson_serializer({"net_payable": Decimal("175218.00")})
    assert orjson.loads(rendered) == {"net_payable": "175218.00"}
