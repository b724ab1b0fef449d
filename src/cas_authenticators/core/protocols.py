"""Protocol contracts for validators and the directory capability they consume."""

from typing import Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from .results import ValidationResult


@runtime_checkable
class CredentialValidator(Protocol):
    """Protocol for credential validation backends.

    Defines ONLY the contract for checking one login attempt.
    Implementations handle backend specifics (directory, fixed test rules, etc.).
    """

    def validate(self, credentials: Mapping[str, Any]) -> ValidationResult:
        """Validate credentials against the backend.

        Args:
            credentials: Raw credentials mapping with at least a ``username`` key

        Returns:
            Falsy result when the backend rejects the attempt, truthy when it
            accepts; extra attributes ride along on the result

        Raises:
            ConfigurationError: If the validator is not configured properly
            MalformedCredentialsError: If the credentials cannot be used at all
            AuthenticationBackendError: If the backend could not be consulted
        """
        ...


@runtime_checkable
class DirectoryClient(Protocol):
    """Protocol for a directory-service connection scoped to one validation call.

    Implementations own the transport. They raise ``DirectoryError`` for
    transport and protocol failures and return falsy values for refused binds.
    """

    def authenticate(self, principal: str, secret: str) -> None:
        """Set the credentials used by the next ``bind``/``bind_as``."""
        ...

    def bind(self) -> bool:
        """Bind with the stored credentials.

        Returns False only for invalidCredentials; any other failure raises
        ``DirectoryError``.
        """
        ...

    def bind_as(
        self,
        base: str,
        password: str,
        filter: Any,
        attributes: Optional[Sequence[str]] = None,
    ) -> Optional[Mapping[str, Any]]:
        """Bind as the entry under ``base`` matching ``filter`` using ``password``.

        The stored credentials are used first to locate the entry. Only the
        requested ``attributes`` are read from it.

        Returns:
            The matched entry's attributes, or None when nothing matched or the
            password was refused
        """
        ...

    def close(self) -> None:
        """Release the connection."""
        ...

    def __enter__(self) -> "DirectoryClient":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...
