"""
Response factory exposed to endpoints through the routing helpers.
"""

from typing import Any, Mapping, Optional

from starlette.responses import Response

from errors.exceptions import ApiException
from errors.responses import ApiResponse


class ResponseFactory:
    """
    Builds success responses and raises error responses.

    The ``error*`` helpers raise ApiException so the error goes through
    the ExceptionHandler like any other failure.
    """

    def array(
        self,
        content: Any,
        status_code: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ApiResponse:
        return ApiResponse(content, status_code, headers=headers)

    def created(self, location: Optional[str] = None, content: Any = None) -> ApiResponse:
        """Respond with 201 Created, setting Location when given."""
        headers = {"Location": location} if location else None
        return ApiResponse(content, 201, headers=headers)

    def accepted(self, location: Optional[str] = None, content: Any = None) -> ApiResponse:
        """Respond with 202 Accepted, setting Location when given."""
        headers = {"Location": location} if location else None
        return ApiResponse(content, 202, headers=headers)

    def no_content(self) -> Response:
        return Response(status_code=204)

    def error(self, message: str, status_code: int) -> None:
        """
        Raise an error response.

        Raises:
            ApiException: Always, with the given message and status
        """
        raise ApiException(message, code=status_code).with_status(status_code)

    def error_bad_request(self, message: str = "Bad Request") -> None:
        self.error(message, 400)

    def error_unauthorized(self, message: str = "Unauthorized") -> None:
        self.error(message, 401)

    def error_forbidden(self, message: str = "Forbidden") -> None:
        self.error(message, 403)

    def error_not_found(self, message: str = "Not Found") -> None:
        self.error(message, 404)

    def error_method_not_allowed(self, message: str = "Method Not Allowed") -> None:
        self.error(message, 405)

    def error_internal(self, message: str = "Internal Error") -> None:
        self.error(message, 500)
