"""
Sentry Integration for Error Tracking.

Initializes Sentry for the storefront client. Anything logged at ERROR level,
such as unexpected order submission errors, is reported as an event.
"""
from __future__ import annotations

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from storefront.core.config import Settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry SDK for error tracking.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    if not settings.sentry_dsn:
        logger.info("Sentry DSN not configured, skipping initialization")
        return False

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # breadcrumbs
        event_level=logging.ERROR,
    )

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1,
        integrations=[
            AioHttpIntegration(),
            logging_integration,
        ],
        send_default_pii=False,
        release=os.getenv("GIT_COMMIT_SHA", "local"),
    )

    logger.info("Sentry initialized for environment: %s", settings.environment)
    return True
