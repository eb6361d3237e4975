"""
Crash reporting module for the API error extensions.

This module provides:
- Report and CrashReporter contracts for "1.0" and "2.0" style notifiers
- Bugsnag-backed notifiers for both contracts
- build_crash_reporter to create the notifier configured in settings
"""

from reporting.base import VERSION_1, VERSION_2, CrashReporter, Report
from reporting.notifiers import BugsnagNotifier, LegacyBugsnagNotifier, build_crash_reporter

__all__ = [
    "VERSION_1",
    "VERSION_2",
    "CrashReporter",
    "Report",
    "BugsnagNotifier",
    "LegacyBugsnagNotifier",
    "build_crash_reporter",
]
