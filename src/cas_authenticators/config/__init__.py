"""Configuration schema, environment loader and logging setup."""

from .settings import (
    DEFAULT_USERNAME_ATTRIBUTE,
    DirectorySettings,
    ValidatorSettings,
    AuthenticatorSettings,
    load_validator_settings,
    get_settings,
)
from .logging_config import LoggingConfig, LogLevel, LogVerbosity, LogFormat

__all__ = [
    "DEFAULT_USERNAME_ATTRIBUTE",
    "DirectorySettings",
    "ValidatorSettings",
    "AuthenticatorSettings",
    "load_validator_settings",
    "get_settings",
    "LoggingConfig",
    "LogLevel",
    "LogVerbosity",
    "LogFormat",
]
