"""
Response type returned by the exception handler and the response factory.
"""

from typing import Any, Mapping, Optional, Tuple, Union

from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask

from errors.codes import get_status_text

StatusCode = Union[int, Tuple[int, Optional[str]]]


class ApiResponse(JSONResponse):
    """
    JSON response carrying an optional status message.

    ASGI servers always send the standard reason phrase on the status
    line, so a custom status message is kept on the response object
    (``status_message``) where middleware and tests can read it.

    The status may be given as an int or as a ``(status_code, status_message)``
    pair, the shape returned by ``ExceptionHandler.get_exception_status_code``.
    """

    def __init__(
        self,
        content: Any = None,
        status_code: StatusCode = 200,
        headers: Optional[Mapping[str, str]] = None,
        status_message: Optional[str] = None,
        background: Optional[BackgroundTask] = None,
    ) -> None:
        if isinstance(status_code, tuple):
            status_code, pair_message = status_code
            status_message = status_message or pair_message
        self.status_message = status_message or get_status_text(status_code)
        super().__init__(
            content=content,
            status_code=status_code,
            headers=dict(headers) if headers else None,
            background=background,
        )
