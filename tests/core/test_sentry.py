"""Tests for Sentry integration helpers."""

from unittest.mock import patch

from settlement_workbench.core import sentry
from settlement_workbench.core.config import settings


def test_init_sentry_skipped_without_dsn(monkeypatch) -> None:
    monkeypatch.setattr(settings, "sentry_dsn", None)
    with patch.object(sentry.sentry_sdk, "init") as init:
        assert sentry.init_sentry() is False
    init.assert_not_called()


def test_init_sentry_with_dsn(monkeypatch) -> None:
    monkeypatch.setattr(settings, "sentry_dsn", "https://key@example.invalid/1")
    with patch.object(sentry.sentry_sdk, "init") as init:
        assert sentry.init_sentry() is True
    kwargs = init.call_args.kwargs
    assert kwargs["dsn"] == "https://key@example.invalid/1"
    assert kwargs["send_default_pii"] is False


def test_report_degraded_captures_exception() -> None:
    exc = RuntimeError("provider down")
    with patch.object(sentry.sentry_sdk, "capture_exception") as capture:
        sentry.report_degraded(exc, component="narrative_provider")
    capture.assert_called_once_with(exc)
