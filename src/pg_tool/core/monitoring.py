"""Sentry integration for error tracking and performance monitoring.

Sentry stays disabled unless PG_TOOL_SENTRY_DSN is set; without init()
every sentry_sdk call is a no-op.
"""

import os

import sentry_sdk

from pg_tool.__about__ import __version__

SENTRY_DSN_ENV = "PG_TOOL_SENTRY_DSN"


def setup_sentry(environment: str = "local") -> bool:
    """Initialize Sentry when a DSN is configured. Returns True if enabled."""
    dsn = os.environ.get(SENTRY_DSN_ENV)
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
