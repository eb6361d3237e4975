"""
Crash reporter contracts.

Two notifier contracts exist and the exception handler picks the call
style from ``CrashReporter.version``:

- "1.0": ``notify_exception(exception, metadata, severity)``
- "2.0": ``notify_exception(exception, callback)`` where ``callback``
  receives a ``Report`` and mutates it before it is sent
"""

from typing import Any, Callable, Dict, Optional

VERSION_1 = "1.0"
VERSION_2 = "2.0"


class Report:
    """
    A crash report being prepared for delivery.

    Callbacks passed to a "2.0" notifier receive an instance of this
    class and may attach metadata and change the severity.
    """

    def __init__(self, exception: BaseException):
        self.exception = exception
        self.metadata: Dict[str, Any] = {}
        self.severity: str = "error"

    def set_metadata(self, metadata: Optional[Dict[str, Any]], merge: bool = False) -> "Report":
        """
        Attach metadata tabs to the report.

        Args:
            metadata: Mapping of tab name to values
            merge: Merge into existing tabs instead of replacing them
        """
        metadata = metadata or {}
        if not merge:
            self.metadata = dict(metadata)
            return self

        for tab, values in metadata.items():
            existing = self.metadata.get(tab)
            if isinstance(existing, dict) and isinstance(values, dict):
                existing.update(values)
            else:
                self.metadata[tab] = values
        return self

    def set_severity(self, severity: Any) -> "Report":
        self.severity = str(getattr(severity, "value", severity))
        return self


class CrashReporter:
    """
    Base class for crash reporting integrations.

    Subclasses set ``version`` and implement ``notify_exception`` with
    the matching call style.
    """

    version: str = VERSION_2

    def notify_exception(self, exception: BaseException, *args: Any) -> None:
        raise NotImplementedError


ReportCallback = Callable[[Report], None]
