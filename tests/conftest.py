"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from typing import Callable
from unittest.mock import MagicMock, patch

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

from config.settings import Settings
from reporting.base import CrashReporter

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,
    print_blob=True,
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


def build_settings(**overrides) -> Settings:
    """Create Settings isolated from the process environment."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(**overrides)


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory fixture creating Settings isolated from the environment."""
    return build_settings


@pytest.fixture
def reporter_v1() -> MagicMock:
    """Mock crash reporter using the "1.0" notifier contract."""
    reporter = MagicMock(spec=CrashReporter)
    reporter.version = "1.0"
    return reporter


@pytest.fixture
def reporter_v2() -> MagicMock:
    """Mock crash reporter using the "2.0" notifier contract."""
    reporter = MagicMock(spec=CrashReporter)
    reporter.version = "2.0"
    return reporter


@pytest.fixture
def sample_field_errors() -> dict:
    """Sample field errors carried by a validation failure."""
    return {
        "email": ["The email field is required."],
        "password": ["The password must be at least 8 characters.", "The password must contain a digit."],
    }
