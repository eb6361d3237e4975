"""
Bugsnag-backed crash reporters.

The ``bugsnag`` package is an optional dependency: when it is not
installed, or no API key is configured, ``build_crash_reporter`` returns
None and exceptions are only logged.
"""

import logging
from typing import Any, Dict, Optional

from reporting.base import VERSION_1, VERSION_2, CrashReporter, Report, ReportCallback

logger = logging.getLogger(__name__)


class LegacyBugsnagNotifier(CrashReporter):
    """Notifier with the "1.0" contract: metadata and severity are passed directly."""

    version = VERSION_1

    def __init__(self, client: Any):
        """
        Args:
            client: A configured ``bugsnag.Client``
        """
        self.client = client

    def notify_exception(
        self,
        exception: BaseException,
        metadata: Optional[Dict[str, Any]] = None,
        severity: Optional[str] = None,
    ) -> None:
        options: Dict[str, Any] = {}
        if metadata:
            options["metadata"] = metadata
        if severity:
            options["severity"] = str(getattr(severity, "value", severity))
        self.client.notify(exception, **options)


class BugsnagNotifier(CrashReporter):
    """Notifier with the "2.0" contract: a callback prepares the report."""

    version = VERSION_2

    def __init__(self, client: Any):
        """
        Args:
            client: A configured ``bugsnag.Client``
        """
        self.client = client

    def notify_exception(
        self,
        exception: BaseException,
        callback: Optional[ReportCallback] = None,
    ) -> None:
        report = Report(exception)
        if callback is not None:
            callback(report)

        options: Dict[str, Any] = {"severity": report.severity}
        if report.metadata:
            options["metadata"] = report.metadata
        self.client.notify(exception, **options)


def build_crash_reporter(settings: Any) -> Optional[CrashReporter]:
    """
    Create the crash reporter configured in settings.

    Args:
        settings: Application settings with bugsnag_api_key,
                  bugsnag_notifier_version and environment

    Returns:
        A notifier matching the configured version, or None when crash
        reporting is not configured or bugsnag is not installed
    """
    api_key = getattr(settings, "bugsnag_api_key", None)
    if not api_key:
        logger.debug("Bugsnag API key not configured, crash reporting disabled")
        return None

    try:
        import bugsnag
    except ImportError as e:
        logger.warning(
            "bugsnag package not installed, crash reporting disabled",
            extra={"extra_data": {"error": str(e)}}
        )
        return None

    environment = getattr(settings, "environment", None)
    release_stage = getattr(environment, "value", environment) or "development"
    client = bugsnag.Client(
        api_key=api_key,
        release_stage=release_stage,
        install_sys_hook=False,
    )

    version = getattr(settings, "bugsnag_notifier_version", VERSION_2)
    notifier_cls = LegacyBugsnagNotifier if version == VERSION_1 else BugsnagNotifier

    logger.info(
        "Bugsnag crash reporting configured",
        extra={"extra_data": {"release_stage": release_stage, "notifier_version": version}}
    )
    return notifier_cls(client)
