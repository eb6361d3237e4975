# Configuration module for the API error extensions
from .settings import (
    ConfigurationError,
    Environment,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "ConfigurationError",
    "Environment",
    "Settings",
    "clear_settings_cache",
    "get_settings",
]
