"""Core domain objects and contracts.

Value objects, exceptions and protocols shared by every validator backend.
"""

from .credentials import Credentials, extract_credentials
from .exceptions import (
    AuthenticatorError,
    ConfigurationError,
    MalformedCredentialsError,
    AuthenticationBackendError,
    public_message,
    create_error_response,
)
from .protocols import CredentialValidator, DirectoryClient
from .results import ValidationResult

__all__ = [
    "Credentials",
    "extract_credentials",
    "AuthenticatorError",
    "ConfigurationError",
    "MalformedCredentialsError",
    "AuthenticationBackendError",
    "public_message",
    "create_error_response",
    "CredentialValidator",
    "DirectoryClient",
    "ValidationResult",
]
