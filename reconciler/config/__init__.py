"""Configuration management module for the Sold Price Reconciler."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import build_app_config, load_config, validate_config_file
from .models import (
    AppConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    MatchingConfig,
    SourceSettings,
    SourcesConfig,
    SourceTag,
)

__all__ = [
    # Main loader functions
    "load_config",
    "build_app_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "SourcesConfig",
    "SourceSettings",
    "MatchingConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "SourceTag",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
