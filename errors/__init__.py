"""
Error handling module for the API error extensions.

This module provides structured error handling with:
- ApiException and its subclasses carrying status, code, field errors,
  severity and reporting metadata
- Capability protocols for exceptions coming from other libraries
- ApiResponse, a JSON response carrying an optional status message
- ExceptionHandler, translating exceptions into responses
"""

from errors.codes import Severity
from errors.exceptions import (
    ApiException,
    DomainException,
    EntityNotFoundException,
    HasErrors,
    HasStatusCode,
    InvalidUserAgentException,
    Reportable,
    ValidationFailedException,
)
from errors.handlers import (
    ExceptionHandler,
    register_exception_handlers,
    render_exception,
)
from errors.responses import ApiResponse

__all__ = [
    "Severity",
    "ApiException",
    "DomainException",
    "EntityNotFoundException",
    "HasErrors",
    "HasStatusCode",
    "InvalidUserAgentException",
    "Reportable",
    "ValidationFailedException",
    "ExceptionHandler",
    "register_exception_handlers",
    "render_exception",
    "ApiResponse",
]
