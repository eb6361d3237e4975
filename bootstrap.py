"""
Wiring of the API extensions into a FastAPI application.

Example:
    app = FastAPI()
    handler = install(app)

    @handler.register
    def render_quota(exc: QuotaExceeded):
        return {"message": "Quota exceeded", "retry_after": exc.retry_after}
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI

from config.settings import Settings, get_settings
from errors.handlers import ExceptionHandler, register_exception_handlers
from middleware.meta import setup_meta_header
from reporting.base import CrashReporter
from reporting.notifiers import build_crash_reporter
from routing.helpers import register_services
from telemetry.service import setup_logging

logger = logging.getLogger(__name__)


def install(
    app: FastAPI,
    settings: Optional[Settings] = None,
    reporter: Optional[CrashReporter] = None,
    auth: Optional[Any] = None,
    configure_logging: bool = False,
) -> ExceptionHandler:
    """
    Install the exception handler, meta header middleware and services.

    Args:
        app: The FastAPI application instance
        settings: Application settings, loaded from the environment if omitted
        reporter: Crash reporter, built from settings if omitted
        auth: Auth service exposed through the routing helpers
        configure_logging: Install the JSON log formatter on the root logger

    Returns:
        The ExceptionHandler, for registering custom exception handlers
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)
    if reporter is None:
        reporter = build_crash_reporter(settings)

    handler = ExceptionHandler(settings, reporter=reporter)
    register_exception_handlers(app, handler)
    setup_meta_header(app, settings, exception_handler=handler)
    register_services(app, auth=auth)

    logger.info(
        "API extensions installed",
        extra={"extra_data": {
            "environment": settings.environment.value,
            "crash_reporting": reporter is not None,
        }}
    )
    return handler
