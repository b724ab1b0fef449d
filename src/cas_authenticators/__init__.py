"""Pluggable credential validators for CAS authentication servers.

A validator checks one username/password attempt against an identity source
and answers accept or reject, optionally with extra identity attributes.

Usage:
    from cas_authenticators import create_validator, ValidatorSettings

    validator = create_validator(ValidatorSettings(authenticator="test"))
    result = validator.validate({"username": "testuser", "password": "testpassword"})
    if result:
        attributes = result.extra_attributes
"""

from .__version__ import __version__
from .core import (
    Credentials,
    extract_credentials,
    AuthenticatorError,
    ConfigurationError,
    MalformedCredentialsError,
    AuthenticationBackendError,
    public_message,
    create_error_response,
    CredentialValidator,
    DirectoryClient,
    ValidationResult,
)
from .config import DirectorySettings, ValidatorSettings, AuthenticatorSettings, get_settings
from .validators import (
    BindStrategy,
    DirectoryValidator,
    TestValidator,
    register_validator,
    create_validator,
)

__all__ = [
    "__version__",
    # Core
    "Credentials",
    "extract_credentials",
    "ValidationResult",
    "CredentialValidator",
    "DirectoryClient",
    # Exceptions
    "AuthenticatorError",
    "ConfigurationError",
    "MalformedCredentialsError",
    "AuthenticationBackendError",
    "public_message",
    "create_error_response",
    # Configuration
    "DirectorySettings",
    "ValidatorSettings",
    "AuthenticatorSettings",
    "get_settings",
    # Validators
    "BindStrategy",
    "DirectoryValidator",
    "TestValidator",
    "register_validator",
    "create_validator",
]
