"""
Structured logging for the API error extensions.

Log records are emitted as JSON objects carrying timestamp, level,
message and context fields. Context is attached to a record through
``extra={"extra_data": {...}}``, the convention used by every module in
this package.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs logs in JSON format.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry

    Fields found in the record's 'extra_data' attribute are merged in,
    and exception information is rendered under 'exception'.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


def setup_logging(settings: Optional[Any] = None) -> logging.Logger:
    """
    Configure the root logger to write JSON lines to stdout.

    Existing root handlers are replaced to avoid duplicate output.

    Args:
        settings: Application settings providing log_level

    Returns:
        The root logger
    """
    log_level_str = getattr(settings, "log_level", None) or "INFO"
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(stdout_handler)

    logging.getLogger("telemetry").info("Logging configured", extra={
        "extra_data": {"log_level": log_level_str}
    })
    return root_logger
