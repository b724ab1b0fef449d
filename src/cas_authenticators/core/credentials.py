"""Credentials value object and extraction from raw login input."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .exceptions import MalformedCredentialsError


@dataclass(frozen=True)
class Credentials:
    """Normalized credentials for one validation attempt.

    Handles ONLY the shape of a login attempt.
    Does not check the credentials against anything.
    """

    username: str
    password: str = ""
    service: Optional[str] = None

    @property
    def has_password(self) -> bool:
        # Whitespace-only passwords count as blank
        return bool(self.password.strip())

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***', service={self.service!r})"


def extract_credentials(credentials: Mapping[str, Any]) -> Credentials:
    """Read the standard fields out of a raw credentials mapping.

    Args:
        credentials: Mapping supplied by the server; extra keys are ignored

    Returns:
        Normalized credentials; a missing password becomes an empty string

    Raises:
        MalformedCredentialsError: If no usable username can be read
    """
    if not isinstance(credentials, Mapping):
        raise MalformedCredentialsError(
            "Credentials must be a mapping",
            details={"type": type(credentials).__name__},
        )

    username = credentials.get("username")
    if not isinstance(username, str):
        raise MalformedCredentialsError(
            "Credentials do not contain a username",
            details={"fields": sorted(str(key) for key in credentials)},
        )

    password = credentials.get("password")
    if password is None:
        password = ""
    elif not isinstance(password, str):
        raise MalformedCredentialsError(
            "Password must be a string",
            details={"type": type(password).__name__},
        )

    service = credentials.get("service")
    return Credentials(
        username=username,
        password=password,
        service=str(service) if service is not None else None,
    )
