"""Sentry error tracking integration."""

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from settlement_workbench.core.config import settings


def init_sentry() -> bool:
    """Initialize Sentry error tracking if a DSN is configured.

    Settlement payloads carry vendor and contract data, so PII is never sent.

    Returns:
        True when Sentry was initialized, False when no DSN is configured.
    """
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(
                transaction_style="endpoint",
                failed_request_status_codes={*range(500, 600)},
            ),
        ],
    )
    return True


def report_degraded(exc: BaseException, *, component: str) -> None:
    """Report a recovered failure so degraded paths stay visible.

    A no-op when Sentry has not been initialized.

    Args:
        exc: The exception that triggered the degraded path.
        component: Name of the component that recovered, used as a tag.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("component", component)
        scope.set_level("warning")
        sentry_sdk.capture_exception(exc)
