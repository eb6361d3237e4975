"""
Property-based tests for rendered error responses.

Checks the guarantees clients rely on for any exception: the status pair
of ApiException is preserved, a message is always present, field errors
are passed through verbatim and debug details only appear in debug mode.
"""

import json

from hypothesis import given, strategies as st

from errors.codes import describe_status
from errors.exceptions import ApiException
from errors.handlers import ExceptionHandler
from config.settings import Settings

HANDLER = ExceptionHandler(Settings(_env_file=None, environment="production"))
DEBUG_HANDLER = ExceptionHandler(Settings(_env_file=None, environment="production", debug=True))

status_codes = st.integers(min_value=100, max_value=599)
messages = st.text(min_size=1, max_size=50).filter(lambda s: s.strip())
field_errors = st.dictionaries(
    keys=st.text(alphabet="abcdefghijklmnopqrstuvwxyz_.", min_size=1, max_size=20),
    values=st.lists(st.text(min_size=1, max_size=40), min_size=1, max_size=3),
    min_size=1,
    max_size=5,
)


def body_of(response) -> dict:
    return json.loads(response.body.decode("utf-8"))


def raised(exc):
    try:
        raise exc
    except BaseException as caught:
        return caught


@given(status_code=status_codes, status_message=st.one_of(st.none(), messages))
def test_status_pair_is_preserved(status_code, status_message):
    exc = ApiException("x", status_code=status_code, status_message=status_message)

    response = HANDLER.generic_response(exc)

    assert HANDLER.get_exception_status_code(exc) == (status_code, status_message)
    assert response.status_code == status_code
    if status_message is not None:
        assert response.status_message == status_message


@given(status_code=status_codes)
def test_missing_message_falls_back_to_status_text(status_code):
    body = body_of(HANDLER.generic_response(ApiException("", status_code=status_code)))

    assert body["message"] == describe_status(status_code)
    assert body["code"] == 500


@given(message=messages, code=st.integers(min_value=1, max_value=10**6))
def test_message_and_code_always_present(message, code):
    body = body_of(HANDLER.generic_response(ApiException(message, code=code)))

    assert body["message"] == message
    assert body["code"] == code


@given(errors=field_errors)
def test_errors_rendered_verbatim(errors):
    body = body_of(HANDLER.generic_response(ApiException("Invalid", errors=errors)))

    assert body["errors"] == errors


@given(message=messages)
def test_errors_absent_without_field_errors(message):
    assert "errors" not in body_of(HANDLER.generic_response(ApiException(message)))
    assert "errors" not in body_of(HANDLER.generic_response(RuntimeError(message)))


@given(message=messages)
def test_debug_only_in_debug_mode(message):
    exc = raised(RuntimeError(message))

    assert "debug" not in body_of(HANDLER.generic_response(exc))

    debug = body_of(DEBUG_HANDLER.generic_response(exc))["debug"]
    assert set(debug) == {"class", "file", "line", "trace"}
    assert debug["trace"]
    assert all(isinstance(line, str) for line in debug["trace"])
