"""Exception hierarchy for cas-authenticators.

A rejected login is not an error: validators return a falsy result for it.
The exceptions below cover the cases where no definite answer could be given.
"""

from typing import Any, Dict, Optional, Union


INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."
SYSTEM_UNAVAILABLE_MESSAGE = "The authentication system is currently unavailable."


class AuthenticatorError(Exception):
    """Base exception for all authenticator errors.

    Carries structured error information so callers can log the failure
    without inspecting backend internals.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        """Whether retrying the same attempt could succeed."""
        return False


class ConfigurationError(AuthenticatorError):
    """Raised when a validator is missing configuration or is misconfigured."""
    pass


class MalformedCredentialsError(AuthenticatorError):
    """Raised when submitted credentials are missing fields or contain forbidden characters."""
    pass


class AuthenticationBackendError(AuthenticatorError):
    """Raised when the identity backend could not be consulted.

    The lower-level cause is chained as ``__cause__`` and its text is kept
    in ``details["cause"]``.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        details = dict(details or {})
        if cause is not None:
            details.setdefault("cause", str(cause))
            details.setdefault("cause_type", type(cause).__name__)
        super().__init__(message, error_code=error_code, details=details)

    @property
    def is_retryable(self) -> bool:
        return True


def public_message(outcome: Union[bool, Any, BaseException]) -> Optional[str]:
    """Map a validation outcome to the message shown to the end user.

    Args:
        outcome: A validation result (anything with truthiness) or the
            exception raised while validating

    Returns:
        None for an accepted attempt, otherwise a generic message that never
        exposes backend details. Malformed credentials read as a plain
        rejection.
    """
    if isinstance(outcome, MalformedCredentialsError):
        return INVALID_CREDENTIALS_MESSAGE
    if isinstance(outcome, BaseException):
        return SYSTEM_UNAVAILABLE_MESSAGE
    if outcome:
        return None
    return INVALID_CREDENTIALS_MESSAGE


def create_error_response(exception: AuthenticatorError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The authenticator exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
