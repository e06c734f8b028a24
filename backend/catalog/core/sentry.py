"""
Sentry integration for error tracking.
"""
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from catalog.core.config import settings


# Trace sampling per environment when no explicit rate is given
TRACE_SAMPLE_RATES = {"production": 0.2, "staging": 0.5}


def init_sentry(dsn: Optional[str] = None, traces_sample_rate: Optional[float] = None):
    """
    Initialize Sentry for error tracking and performance monitoring.

    Args:
        dsn: Sentry DSN. If None, Sentry stays disabled.
        traces_sample_rate: Fraction of transactions to trace (0.0 to 1.0);
            defaults by environment, everything outside production and staging
    """
    if not dsn:
        return

    if traces_sample_rate is None:
        traces_sample_rate = TRACE_SAMPLE_RATES.get(settings.ENVIRONMENT, 1.0)

    sentry_sdk.init(
        dsn=dsn,
        environment=settings.ENVIRONMENT,
        release=f"{settings.APP_NAME}@{settings.APP_VERSION}",
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )


def capture_exception(error: Exception, context: Optional[dict] = None):
    """
    Capture an exception to Sentry with optional context.

    A no-op when the SDK was never initialised.
    """
    if not settings.SENTRY_DSN:
        return

    with sentry_sdk.new_scope() as scope:
        if context:
            for key, value in context.items():
                scope.set_context(key, value)

        sentry_sdk.capture_exception(error)


def set_principal(username: str) -> None:
    """Attach the authenticated steward to subsequent events of this request."""
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.set_user({"username": username})
