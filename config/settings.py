"""
Configuration management for the API error extensions.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are loaded from environment variables or .env files.

Covers:
- Environment detection used by the bypass list and the meta header middleware
- Exception rendering options (debug mode, response template, replacements)
- Crash reporting options (Bugsnag API key and notifier version)
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


# Environments treated as local: strict header checks are skipped here
LOCAL_ENVIRONMENTS = frozenset({Environment.DEVELOPMENT})

DEFAULT_ERROR_FORMAT: Dict[str, Any] = {
    "message": ":message",
    "code": ":code",
    "errors": ":errors",
    "debug": ":debug",
}

DEFAULT_DONT_REPORT: List[str] = [
    "InvalidTokenException",
    "MissingTokenException",
    "TokenExpiredException",
]


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    The base .env file is loaded first, then the environment-specific file
    overrides it.
    """
    return (".env", f".env.{environment.value}")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a default so the extensions can be dropped into an
    application without any configuration. Environment-specific values are
    read from .env.<environment> on top of .env.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, testing, staging, production)"
    )
    debug: bool = Field(
        default=False,
        description="Include exception class, file, line and trace in error responses"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Exception handling
    dont_report: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DONT_REPORT),
        description="Exception class names that are never sent to the crash reporter"
    )
    throw_on_environments: List[str] = Field(
        default_factory=list,
        description="Environments where exceptions are re-raised instead of rendered"
    )
    error_format: Dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_ERROR_FORMAT),
        description="Template of the error response body"
    )
    error_replacements: Dict[str, Any] = Field(
        default_factory=dict,
        description="Static placeholder values merged into every error response"
    )

    # Meta header
    strict_meta_header: bool = Field(
        default=False,
        description="Reject requests that do not carry the meta header"
    )
    meta_header: str = Field(
        default="N-Meta",
        description="Name of the required request metadata header"
    )

    # Crash reporting
    bugsnag_api_key: Optional[str] = Field(
        default=None,
        description="Bugsnag project API key, reporting is disabled when unset"
    )
    bugsnag_notifier_version: str = Field(
        default="2.0",
        description="Notifier contract used for crash reports ('1.0' or '2.0')"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @field_validator("throw_on_environments")
    @classmethod
    def validate_throw_on_environments(cls, v: List[str]) -> List[str]:
        """Normalize environment names to lowercase."""
        return [name.strip().lower() for name in v if name and name.strip()]

    @field_validator("error_replacements")
    @classmethod
    def validate_error_replacements(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Validate that every replacement key is a placeholder token."""
        for key in v:
            if not key.startswith(":"):
                raise ValueError(
                    f"error_replacements key '{key}' must start with ':'"
                )
        return v

    @field_validator("meta_header")
    @classmethod
    def validate_meta_header(cls, v: str) -> str:
        """Validate that meta_header is not empty."""
        if not v or not v.strip():
            raise ValueError("meta_header cannot be empty")
        return v.strip()

    @field_validator("bugsnag_notifier_version")
    @classmethod
    def validate_bugsnag_notifier_version(cls, v: str) -> str:
        """Validate that the notifier version is one we know how to call."""
        v = v.strip()
        if v not in {"1.0", "2.0"}:
            raise ValueError("bugsnag_notifier_version must be '1.0' or '2.0'")
        return v

    def is_local(self) -> bool:
        """Return True when running in a local development environment."""
        return self.environment in LOCAL_ENVIRONMENTS


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If settings are invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = [f for f in _get_env_files(environment) if Path(f).exists()]

    try:
        class EnvironmentSettings(Settings):
            model_config = SettingsConfigDict(
                env_file=tuple(env_files) or None,
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        if hasattr(e, "errors"):
            for error in e.errors():
                field_name = ".".join(str(loc) for loc in error.get("loc", []))
                error_type = error.get("type", "")
                error_msg = error.get("msg", str(error))

                if error_type == "missing":
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Settings are loaded once and cached for subsequent calls.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None
