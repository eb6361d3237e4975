"""
Meta header middleware.

Clients identify themselves (platform, app version, device) through a
metadata header, ``N-Meta`` by default. When strict checking is enabled
in settings, requests without it are rejected with a 400 outside local
environments.
"""

import logging
from typing import Any, Callable, Optional

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from errors.exceptions import ApiException, InvalidUserAgentException
from errors.handlers import ExceptionHandler, render_exception

logger = logging.getLogger(__name__)


def check_meta_header(request: Request, settings: Any) -> None:
    """
    Validate that the request carries the meta header.

    Args:
        request: The incoming request
        settings: Application settings (environment, strict_meta_header, meta_header)

    Raises:
        InvalidUserAgentException: If strict checking applies and the header is missing
    """
    if settings.is_local() or not settings.strict_meta_header:
        return

    if not request.headers.get(settings.meta_header):
        raise InvalidUserAgentException(
            "Missing [%s] header" % settings.meta_header
        ).with_status(400)


class MetaHeaderMiddleware(BaseHTTPMiddleware):
    """
    Middleware rejecting requests without the meta header.

    Exceptions raised from BaseHTTPMiddleware bypass the application's
    exception handlers, so the rejection is rendered here with the
    ExceptionHandler registered on ``app.state.exception_handler`` (or the
    one passed in).
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: Any,
        exception_handler: Optional[ExceptionHandler] = None,
    ):
        """
        Initialize the middleware.

        Args:
            app: The ASGI application to wrap
            settings: Application settings
            exception_handler: Handler used to render rejections
        """
        super().__init__(app)
        self.settings = settings
        self.exception_handler = exception_handler

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        try:
            check_meta_header(request, self.settings)
        except ApiException as exc:
            logger.info(
                "Request rejected: missing meta header",
                extra={"extra_data": {
                    "header": self.settings.meta_header,
                    "path": request.url.path,
                    "method": request.method,
                }}
            )
            handler = self.exception_handler or getattr(request.app.state, "exception_handler", None)
            if handler is None:
                raise
            return await run_in_threadpool(render_exception, handler, exc)

        return await call_next(request)


def setup_meta_header(app, settings: Any, exception_handler: Optional[ExceptionHandler] = None) -> None:
    """
    Add the MetaHeaderMiddleware to a FastAPI application.

    Args:
        app: The FastAPI application instance
        settings: Application settings
        exception_handler: Handler used to render rejections
    """
    app.add_middleware(
        MetaHeaderMiddleware,
        settings=settings,
        exception_handler=exception_handler,
    )

    logger.info(
        f"Meta header middleware configured: header={settings.meta_header}, "
        f"strict={settings.strict_meta_header}"
    )
