"""
Exception handler for the API error extensions.

This module converts any exception raised while serving a request into a
structured JSON response:

- SQLAlchemy NoResultFound is translated into EntityNotFoundException
- FastAPI RequestValidationError is rendered as ValidationFailedException
- Exceptions are re-raised untouched in configured environments (tests)
- Every other exception is reported (crash reporter + error log), passed
  to the first matching registered handler, or rendered from the
  configured response template
"""

import copy
import inspect
import logging
import traceback
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from errors.codes import Severity, describe_status, get_status_text
from errors.exceptions import (
    ApiException,
    DomainException,
    EntityNotFoundException,
    HasErrors,
    HasStatusCode,
    ValidationFailedException,
)
from errors.responses import ApiResponse, StatusCode
from reporting.base import VERSION_1, VERSION_2, CrashReporter, Report

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = ":"
DEFAULT_STATUS_CODE = 500
DEFAULT_ERROR_CODE = 500

ExceptionRenderer = Callable[[Any], Any]

# Marks a template value whose placeholder had no replacement
_UNRESOLVED = object()


def _is_placeholder(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(PLACEHOLDER_PREFIX)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, dict, list, tuple)) and not value)


def _class_path(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


class ExceptionHandler:
    """
    Translates exceptions into API responses.

    Args:
        settings: Application settings (environment, debug,
                  throw_on_environments, dont_report, error_format,
                  error_replacements)
        logger: Logger receiving the error log entries
        reporter: Optional crash reporter, see reporting.base
    """

    def __init__(
        self,
        settings: Any,
        logger: Optional[logging.Logger] = None,
        reporter: Optional[CrashReporter] = None,
    ):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.reporter = reporter
        self.handlers: List[Tuple[Type[BaseException], ExceptionRenderer]] = []
        self.error_format: Dict[str, Any] = copy.deepcopy(settings.error_format)
        self.replacements: Dict[str, Any] = dict(settings.error_replacements)

    def register(
        self,
        exception_type: Union[Type[BaseException], ExceptionRenderer],
        handler: Optional[ExceptionRenderer] = None,
    ):
        """
        Register a handler for an exception type.

        Handlers are tried in registration order and the first one whose
        exception type matches and which returns something wins. Can be used
        three ways:

            handler.register(MyError, render_my_error)

            @handler.register(MyError)
            def render_my_error(exc): ...

            def render_my_error(exc: MyError): ...
            handler.register(render_my_error)
        """
        if not (inspect.isclass(exception_type) and issubclass(exception_type, BaseException)):
            renderer = exception_type
            self.handlers.append((self._hinted_exception_type(renderer), renderer))
            return renderer

        if handler is None:
            def decorator(renderer: ExceptionRenderer) -> ExceptionRenderer:
                self.handlers.append((exception_type, renderer))
                return renderer
            return decorator

        self.handlers.append((exception_type, handler))
        return handler

    @staticmethod
    def _hinted_exception_type(renderer: ExceptionRenderer) -> Type[BaseException]:
        parameters = list(inspect.signature(renderer).parameters.values())
        hints = typing.get_type_hints(renderer)
        hint = hints.get(parameters[0].name) if parameters else None
        if not (inspect.isclass(hint) and issubclass(hint, BaseException)):
            raise TypeError(
                f"Handler {renderer!r} must annotate its first parameter with an exception type"
            )
        return hint

    def should_report(self, exception: BaseException) -> bool:
        """Return False when the exception's class is listed in dont_report."""
        ignored = set(self.settings.dont_report)
        for cls in type(exception).__mro__:
            if cls.__name__ in ignored or _class_path(cls) in ignored:
                return False
        return True

    def report(self, exception: BaseException) -> None:
        """
        Send the exception to the crash reporter and log it.

        Reporting is best effort: any failure is swallowed. The error log
        entry is always written.
        """
        try:
            self._notify_reporter(exception)
        except Exception:
            self.logger.debug("Crash reporter failed", exc_info=True)

        self.logger.error(
            "%s: %s",
            type(exception).__name__,
            exception,
            exc_info=(type(exception), exception, exception.__traceback__),
            extra={"extra_data": {
                "exception_type": _class_path(type(exception)),
                "status_code": self.get_status_code(exception),
            }},
        )

    def _notify_reporter(self, exception: BaseException) -> None:
        reporter = self.reporter
        if reporter is None or not self.should_report(exception):
            return

        domain = isinstance(exception, DomainException)
        if domain and not exception.should_report:
            return

        if domain:
            meta = exception.meta
            severity = Severity(exception.severity).value
        else:
            meta = None
            severity = Severity.ERROR.value

        if reporter.version == VERSION_1:
            reporter.notify_exception(exception, meta, severity)
        elif reporter.version == VERSION_2:
            def prepare(report: Report) -> None:
                if meta:
                    report.set_metadata(meta, True)
                report.set_severity(severity)

            reporter.notify_exception(exception, prepare)

    def handle(self, exception: BaseException) -> Response:
        """
        Handle an exception and build the response for it.

        Raises:
            EntityNotFoundException: When the exception is SQLAlchemy's
                NoResultFound, so the caller renders a 404 instead

        A FastAPI RequestValidationError is handled as a
        ValidationFailedException, so it is rendered as a 422 and not sent
        to the crash reporter.
            BaseException: The exception itself when running in one of the
                throw_on_environments
        """
        if isinstance(exception, NoResultFound):
            raise EntityNotFoundException(str(exception)) from exception

        environment = getattr(self.settings.environment, "value", self.settings.environment)
        if environment in self.settings.throw_on_environments:
            raise exception

        if isinstance(exception, RequestValidationError):
            exception = ValidationFailedException.from_validation_errors(
                exception.errors()
            ).with_traceback(exception.__traceback__)

        self.report(exception)

        for hint, handler in self.handlers:
            if not isinstance(exception, hint):
                continue

            response = handler(exception)
            if response:
                if not isinstance(response, Response):
                    response = ApiResponse(response, self.get_exception_status_code(exception))
                return response

        return self.generic_response(exception)

    def generic_response(self, exception: BaseException) -> ApiResponse:
        """Render the exception through the configured response template."""
        replacements = self.prepare_replacements(exception)

        body = self._render(self.new_response_body(), replacements)
        if body is _UNRESOLVED:
            body = {}

        return ApiResponse(
            body,
            self.get_exception_status_code(exception),
            headers=self.get_headers(exception),
        )

    def new_response_body(self) -> Dict[str, Any]:
        return copy.deepcopy(self.error_format)

    def _render(self, value: Any, replacements: Dict[str, Any]) -> Any:
        # Substitutes placeholders and drops unresolved or empty entries
        if isinstance(value, dict):
            rendered = {}
            for key, item in value.items():
                item = self._render(item, replacements)
                if item is not _UNRESOLVED and not _is_empty(item):
                    rendered[key] = item
            return rendered

        if isinstance(value, list):
            rendered_items = [self._render(item, replacements) for item in value]
            return [item for item in rendered_items if item is not _UNRESOLVED and not _is_empty(item)]

        if _is_placeholder(value):
            return replacements.get(value, _UNRESOLVED)

        return value

    def prepare_replacements(self, exception: BaseException) -> Dict[str, Any]:
        """
        Build the placeholder values for an exception.

        Configured error_replacements act as defaults: computed values
        take precedence when keys collide.
        """
        status_code = self.get_status_code(exception)

        message = self._get_message(exception)
        if not message:
            message = describe_status(status_code)

        code = getattr(exception, "code", 0)
        if not isinstance(code, int) or isinstance(code, bool):
            code = 0

        replacements: Dict[str, Any] = {
            ":message": message,
            ":code": code or DEFAULT_ERROR_CODE,
        }

        if isinstance(exception, HasErrors) and exception.has_errors():
            replacements[":errors"] = exception.get_errors()

        if self.settings.debug:
            replacements[":debug"] = self._debug_details(exception)

        return {**self.replacements, **replacements}

    @staticmethod
    def _get_message(exception: BaseException) -> str:
        detail = getattr(exception, "detail", None)
        if isinstance(exception, StarletteHTTPException) and isinstance(detail, str):
            # Starlette fills a missing detail with the reason phrase
            if detail == get_status_text(exception.status_code):
                return ""
            return detail
        return str(exception)

    @staticmethod
    def _debug_details(exception: BaseException) -> Dict[str, Any]:
        tb = exception.__traceback__
        frames = traceback.extract_tb(tb)
        origin = frames[-1] if frames else None
        formatted = "".join(traceback.format_exception(type(exception), exception, tb))

        return {
            "class": _class_path(type(exception)),
            "file": origin.filename if origin else None,
            "line": origin.lineno if origin else None,
            "trace": [line for line in formatted.split("\n") if line.strip()],
        }

    def get_exception_status_code(
        self, exception: BaseException, default_status_code: int = DEFAULT_STATUS_CODE
    ) -> StatusCode:
        """
        Get the status of the response for an exception.

        Returns:
            (status_code, status_message) for domain exceptions, the status code
            of HTTP exceptions, default_status_code for anything else
        """
        if isinstance(exception, DomainException):
            return exception.status_code, exception.status_message
        if isinstance(exception, HasStatusCode) and isinstance(exception.status_code, int):
            return exception.status_code
        return default_status_code

    def get_status_code(self, exception: BaseException) -> int:
        status = self.get_exception_status_code(exception)
        return status[0] if isinstance(status, tuple) else status

    def get_headers(self, exception: BaseException) -> Dict[str, str]:
        if isinstance(exception, HasStatusCode):
            headers = getattr(exception, "headers", None)
            if headers:
                return dict(headers)
        return {}


def render_exception(handler: ExceptionHandler, exception: BaseException) -> Response:
    """
    Handle an exception, rendering a translated EntityNotFoundException.

    Exceptions re-raised by the handler (throw_on_environments) propagate.
    """
    try:
        return handler.handle(exception)
    except EntityNotFoundException as not_found:
        if not_found is exception or not isinstance(exception, NoResultFound):
            raise
        return handler.handle(not_found)


def register_exception_handlers(app: FastAPI, handler: ExceptionHandler) -> ExceptionHandler:
    """
    Register the exception handler with the FastAPI application.

    The handler is stored on ``app.state.exception_handler`` so middleware
    can render the exceptions it raises.

    Args:
        app: The FastAPI application instance
        handler: The configured ExceptionHandler

    Returns:
        The registered handler
    """
    app.state.exception_handler = handler

    # Sync callable: Starlette runs it in the threadpool, off the event loop
    def handle_exception(request: Request, exc: Exception) -> Response:
        return render_exception(handler, exc)

    for exception_class in (
        ApiException,
        NoResultFound,
        StarletteHTTPException,
        RequestValidationError,
        Exception,
    ):
        app.add_exception_handler(exception_class, handle_exception)

    logger.info(
        "Exception handlers registered successfully",
        extra={"extra_data": {
            "environment": getattr(handler.settings.environment, "value", handler.settings.environment),
            "debug": handler.settings.debug,
        }}
    )
    return handler
