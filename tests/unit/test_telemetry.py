"""
Unit tests for structured JSON logging.
"""

import json
import logging
import sys

import pytest

from telemetry.service import JSONFormatter, setup_logging


def make_record(msg="Something happened", level=logging.INFO, exc_info=None, **attrs):
    record = logging.LogRecord(
        name="errors.handlers",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
        func="handle",
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for the JSONFormatter class."""

    def test_base_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Something happened"
        assert data["logger"] == "errors.handlers"
        assert data["function"] == "handle"
        assert data["line"] == 42
        assert data["timestamp"].endswith("Z")

    def test_extra_data_is_merged(self):
        record = make_record(extra_data={"status_code": 404, "exception_type": "KeyError"})

        data = json.loads(JSONFormatter().format(record))

        assert data["status_code"] == 404
        assert data["exception_type"] == "KeyError"

    def test_exception_is_formatted(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: broken" in data["exception"]

    def test_non_serializable_values_use_str(self):
        record = make_record(extra_data={"exception": ValueError("x")})

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"] == "x"


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_installs_single_json_handler(self, make_settings):
        root = setup_logging(make_settings(log_level="WARNING"))

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_defaults_to_info_without_settings(self):
        root = setup_logging()

        assert root.level == logging.INFO
