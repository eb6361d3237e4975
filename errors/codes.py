"""
Severity levels and HTTP status texts used by the error handling module.

Severity values follow the levels accepted by crash reporting services.
Status texts come from the standard HTTP reason phrases; codes without a
standard phrase fall back to a fixed message.
"""

from enum import Enum
from http import HTTPStatus
from typing import Optional


class Severity(str, Enum):
    """
    Severity attached to an exception when it is reported.

    - ERROR: unexpected failure, should be investigated
    - WARNING: expected failure caused by the client
    - INFO: informational, usually not worth alerting on
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


MISSING_STATUS_TEXT = "No message was set in exception"


def get_status_text(status_code: int) -> Optional[str]:
    """
    Get the standard reason phrase for an HTTP status code.

    Args:
        status_code: The HTTP status code to look up

    Returns:
        The reason phrase (e.g. "Not Found"), or None for unknown codes
    """
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return None


def describe_status(status_code: int) -> str:
    """
    Build the fallback message used when an exception carries no message.

    Example:
        describe_status(404) == "404: Not Found"
        describe_status(499) == "499: No message was set in exception"
    """
    return "%d: %s" % (status_code, get_status_text(status_code) or MISSING_STATUS_TEXT)
