"""
Unit tests for the configuration settings module.

Tests cover:
- Default values
- Loading values from environment variables
- Invalid field format validation
- Environment detection and the settings cache
"""

import os
import pytest
from unittest.mock import patch

from pydantic import ValidationError

from config.settings import (
    DEFAULT_ERROR_FORMAT,
    Settings,
    Environment,
    ConfigurationError,
    create_settings_for_environment,
    get_settings,
    clear_settings_cache,
)


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values_are_applied(self):
        """Test that default values are correctly applied."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

            assert settings.environment == Environment.DEVELOPMENT
            assert settings.debug is False
            assert settings.log_level == "INFO"
            assert settings.throw_on_environments == []
            assert settings.error_format == DEFAULT_ERROR_FORMAT
            assert settings.error_replacements == {}
            assert settings.strict_meta_header is False
            assert settings.meta_header == "N-Meta"
            assert settings.bugsnag_api_key is None
            assert settings.bugsnag_notifier_version == "2.0"
            assert "TokenExpiredException" in settings.dont_report

    def test_values_loaded_from_environment(self):
        """Test that values are read from environment variables."""
        env_vars = {
            "ENVIRONMENT": "staging",
            "DEBUG": "true",
            "THROW_ON_ENVIRONMENTS": '["Testing", "local"]',
            "STRICT_META_HEADER": "1",
            "ERROR_REPLACEMENTS": '{":docs": "https://docs.example.com"}',
            "BUGSNAG_API_KEY": "abc123",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings()

            assert settings.environment == Environment.STAGING
            assert settings.debug is True
            assert settings.throw_on_environments == ["testing", "local"]
            assert settings.strict_meta_header is True
            assert settings.error_replacements == {":docs": "https://docs.example.com"}
            assert settings.bugsnag_api_key == "abc123"

    def test_default_error_format_is_not_shared(self):
        """Test that each Settings instance gets its own template copy."""
        with patch.dict(os.environ, {}, clear=True):
            first = Settings()
            first.error_format["extra"] = ":extra"

            assert "extra" not in Settings().error_format

    def test_log_level_is_normalized(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Settings(log_level=" debug ").log_level == "DEBUG"

    def test_invalid_log_level_raises_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(log_level="VERBOSE")

            assert "log_level" in str(exc_info.value)

    def test_replacement_keys_must_be_placeholders(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(error_replacements={"docs": "https://docs.example.com"})

            assert "must start with ':'" in str(exc_info.value)

    def test_invalid_notifier_version_raises_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                Settings(bugsnag_notifier_version="3.0")

    def test_empty_meta_header_raises_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                Settings(meta_header="  ")

    @pytest.mark.parametrize(
        "environment, expected",
        [
            ("development", True),
            ("testing", False),
            ("staging", False),
            ("production", False),
        ],
    )
    def test_is_local(self, environment, expected):
        with patch.dict(os.environ, {}, clear=True):
            assert Settings(environment=environment).is_local() is expected


class TestCreateSettings:
    """Tests for environment detection and the settings cache."""

    def setup_method(self):
        clear_settings_cache()

    def teardown_method(self):
        clear_settings_cache()

    def test_environment_detected_from_variable(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}, clear=True):
            settings = create_settings_for_environment()

            assert settings.environment == Environment.PRODUCTION

    def test_unknown_environment_defaults_to_development(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "qa"}, clear=True):
            from config.settings import _detect_environment

            assert _detect_environment() == Environment.DEVELOPMENT

    def test_invalid_configuration_raises_configuration_error(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                create_settings_for_environment(Environment.TESTING)

            assert "log_level" in exc_info.value.invalid_fields
            assert "testing" in str(exc_info.value)

    def test_get_settings_is_cached(self):
        with patch.dict(os.environ, {}, clear=True):
            first = get_settings()
            second = get_settings()

            assert first is second

    def test_clear_settings_cache_reloads(self):
        with patch.dict(os.environ, {"DEBUG": "false"}, clear=True):
            first = get_settings()

        clear_settings_cache()

        with patch.dict(os.environ, {"DEBUG": "true"}, clear=True):
            second = get_settings()

        assert first is not second
        assert second.debug is True


class TestConfigurationError:
    """Tests for the ConfigurationError message."""

    def test_message_lists_missing_and_invalid_fields(self):
        error = ConfigurationError(
            "Configuration failed",
            missing_fields=["bugsnag_api_key"],
            invalid_fields={"log_level": "must be one of ..."},
        )

        message = str(error)
        assert "Missing required fields: bugsnag_api_key" in message
        assert "  - log_level: must be one of ..." in message
