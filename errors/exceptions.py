"""
Exception classes for the API error extensions.

This module provides the ApiException base class carrying the structured
metadata the exception handler understands (status code and message,
numeric error code, field errors, severity, reporting flag and crash report
metadata), the concrete exceptions raised by this package, and the
capability protocols used to inspect exceptions from other libraries.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from errors.codes import Severity

FieldErrors = Dict[str, List[str]]


@runtime_checkable
class HasStatusCode(Protocol):
    """Any exception carrying an HTTP status code (e.g. Starlette's HTTPException)."""

    status_code: int


@runtime_checkable
class HasErrors(Protocol):
    """Any exception carrying field-level error messages."""

    def has_errors(self) -> bool:
        ...

    def get_errors(self) -> Mapping[str, Any]:
        ...


@runtime_checkable
class Reportable(Protocol):
    """Any exception carrying crash reporting instructions."""

    should_report: bool
    severity: Severity
    meta: Dict[str, Any]


@runtime_checkable
class DomainException(Reportable, HasStatusCode, Protocol):
    """
    Any exception carrying the full set of response and reporting metadata.

    ApiException and its subclasses implement it; exceptions from other
    libraries do when they expose the same attributes.
    """

    status_message: Optional[str]


class ApiException(Exception):
    """
    Base exception class for all errors rendered by the API.

    Class attributes hold the defaults for a subclass; every one of them
    can be overridden per instance through the constructor or the
    chainable ``with_*`` helpers.

    Example:
        raise ApiException(
            "Email is invalid",
            code=1001,
            status_code=422,
            errors={"email": ["The email field must be a valid email."]},
        )
    """

    status_code: int = 500
    status_message: Optional[str] = None
    code: int = 0
    severity: Severity = Severity.ERROR
    should_report: bool = True

    def __init__(
        self,
        message: str = "",
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        status_message: Optional[str] = None,
        errors: Optional[Mapping[str, Any]] = None,
        severity: Optional[Severity] = None,
        should_report: Optional[bool] = None,
        meta: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize an ApiException.

        Args:
            message: A human-readable error message
            code: Numeric error code rendered in the response body
            status_code: HTTP status code of the response
            status_message: Optional HTTP status message
            errors: Field-level error messages
            severity: Severity used when reporting the exception
            should_report: Whether the exception is sent to the crash reporter
            meta: Extra metadata attached to crash reports
            headers: Extra headers added to the response
        """
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        if status_message is not None:
            self.status_message = status_message
        if severity is not None:
            self.severity = Severity(severity)
        if should_report is not None:
            self.should_report = should_report
        self.errors: Dict[str, Any] = dict(errors or {})
        self.meta: Dict[str, Any] = dict(meta or {})
        self.headers: Dict[str, str] = dict(headers or {})

    def has_errors(self) -> bool:
        return bool(self.errors)

    def get_errors(self) -> Dict[str, Any]:
        return self.errors

    def with_status(self, status_code: int, status_message: Optional[str] = None) -> "ApiException":
        """Set the HTTP status code (and optionally message) and return self."""
        self.status_code = status_code
        self.status_message = status_message
        return self

    def with_errors(self, errors: Mapping[str, Any]) -> "ApiException":
        self.errors = dict(errors)
        return self

    def with_meta(self, meta: Dict[str, Any]) -> "ApiException":
        self.meta = dict(meta)
        return self

    def with_severity(self, severity: Severity) -> "ApiException":
        self.severity = Severity(severity)
        return self

    def dont_report(self) -> "ApiException":
        self.should_report = False
        return self

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code}, "
            f"status_code={self.status_code}, errors={self.errors!r})"
        )


class EntityNotFoundException(ApiException):
    """Raised when an entity looked up for a request does not exist."""

    status_code = 404
    status_message = "Entity not found"
    code = 404
    severity = Severity.WARNING
    should_report = False


class InvalidUserAgentException(ApiException):
    """Raised when a request is missing the required meta header."""

    status_code = 400
    code = 400
    severity = Severity.WARNING


class ValidationFailedException(ApiException):
    """Raised when the request payload fails validation."""

    status_code = 422
    status_message = "Validation failed"
    code = 422
    severity = Severity.WARNING
    should_report = False

    @classmethod
    def from_validation_errors(cls, errors: List[Dict[str, Any]]) -> "ValidationFailedException":
        """
        Build the exception from pydantic/FastAPI validation error entries.

        Each entry's location (minus the leading "body"/"query"/... part)
        becomes the field name; messages for the same field are grouped
        in order.
        """
        field_errors: FieldErrors = {}
        for error in errors:
            loc = [str(part) for part in error.get("loc", ())]
            if len(loc) > 1:
                loc = loc[1:]
            field = ".".join(loc) or "__root__"
            field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
        return cls("Validation failed", errors=field_errors)
