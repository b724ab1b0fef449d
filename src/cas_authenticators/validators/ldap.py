"""Directory (LDAP) credential validator."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..config.settings import DirectorySettings, ValidatorSettings, load_validator_settings
from ..core.credentials import Credentials, extract_credentials
from ..core.exceptions import (
    AuthenticationBackendError,
    ConfigurationError,
    MalformedCredentialsError,
)
from ..core.protocols import DirectoryClient
from ..core.results import ValidationResult
from ..directory.filters import DirectoryFilter
from ..directory.ldap3_client import DirectoryError, Ldap3DirectoryClient

logger = logging.getLogger(__name__)

# Filter metacharacters, NUL and the DN path separator
FORBIDDEN_USERNAME_CHARACTERS = frozenset("*()\0/")

DirectoryClientFactory = Callable[..., DirectoryClient]


class BindStrategy(str, Enum):
    """How the submitted username is turned into a directory bind."""

    DIRECT_BIND = "direct_bind"
    PREAUTHENTICATED_BIND_AS = "preauthenticated_bind_as"

    @classmethod
    def for_settings(cls, settings: DirectorySettings) -> 'BindStrategy':
        if settings.has_service_account:
            return cls.PREAUTHENTICATED_BIND_AS
        return cls.DIRECT_BIND


@dataclass(frozen=True)
class DirectoryAttempt:
    """Per-call state of one directory validation."""

    credentials: Credentials
    username: str
    strategy: BindStrategy


def normalize_username(username: str, prefix: Optional[str] = None) -> str:
    """Escape backslashes and append the configured prefix.

    The prefix is appended, not prepended, so ``jdoe`` with prefix
    ``@example.com`` binds as ``jdoe@example.com``.
    """
    normalized = username.replace("\\", "\\\\")
    if prefix:
        normalized = normalized + prefix
    return normalized


def denormalize_username(normalized: str, prefix: Optional[str] = None) -> str:
    """Reverse ``normalize_username``."""
    if prefix and normalized.endswith(prefix):
        normalized = normalized[: -len(prefix)]
    return normalized.replace("\\\\", "\\")


class DirectoryValidator:
    """Credential validator backed by a directory server.

    Without a service account the username is bound directly as the entry's
    DN, which only works where the login name is the DN. With ``auth_user``
    configured the validator binds as that account first, finds the entry
    whose ``username_attribute`` matches and binds as it with the submitted
    password.

    Only the parsed configuration is stored on the instance, so one validator
    can serve concurrent calls.
    """

    def __init__(
        self,
        options: Union[None, ValidatorSettings, Mapping[str, Any]] = None,
        client_factory: Optional[DirectoryClientFactory] = None,
    ):
        """Initialize directory validator.

        Args:
            options: Validator settings or the equivalent mapping; may be None
                until configured, in which case ``validate`` fails
            client_factory: Builds a directory client from
                ``(host, port, use_ssl=..., connect_timeout=...)``

        Raises:
            ConfigurationError: If ``options`` does not match the schema
        """
        self._settings = load_validator_settings(options)
        self._client_factory = client_factory or Ldap3DirectoryClient

    @property
    def settings(self) -> Optional[ValidatorSettings]:
        return self._settings

    def validate(self, credentials: Mapping[str, Any]) -> ValidationResult:
        """Validate credentials against the directory.

        Raises:
            ConfigurationError: If the directory settings are missing or incomplete
            MalformedCredentialsError: If the username is unusable
            AuthenticationBackendError: If the directory exchange failed
        """
        submitted = extract_credentials(credentials)

        # Blank passwords and empty names never reach the directory
        if not submitted.has_password or not submitted.username:
            logger.info(f"Rejecting {submitted.username!r}: empty username or password")
            return ValidationResult.reject()

        directory = self._require_directory_settings()

        if FORBIDDEN_USERNAME_CHARACTERS.intersection(submitted.username):
            raise MalformedCredentialsError(
                f"The username '{submitted.username}' contains invalid characters.",
                details={"reason": "forbidden_characters"},
            )

        attempt = DirectoryAttempt(
            credentials=submitted,
            username=normalize_username(submitted.username, directory.username_prefix),
            strategy=BindStrategy.for_settings(directory),
        )

        if attempt.strategy is BindStrategy.PREAUTHENTICATED_BIND_AS:
            self._check_preauthentication_settings(directory)

        try:
            with self._client_factory(
                directory.server,
                directory.port,
                use_ssl=directory.use_ssl,
                connect_timeout=directory.connect_timeout,
            ) as client:
                if attempt.strategy is BindStrategy.PREAUTHENTICATED_BIND_AS:
                    result = self._bind_with_preauthentication(client, directory, attempt)
                else:
                    result = self._bind_directly(client, attempt)
        except DirectoryError as e:
            logger.error(
                f"Directory validation of {attempt.username} against {directory.server} failed: {e}"
            )
            raise AuthenticationBackendError(
                f"LDAP authentication failed with '{e}'. Check your authenticator configuration.",
                details={"server": directory.server, "strategy": attempt.strategy.value},
                cause=e,
            ) from e

        if not result:
            logger.info(f"Directory rejected credentials for {attempt.username}")
        return result

    def _require_directory_settings(self) -> DirectorySettings:
        if self._settings is None:
            raise ConfigurationError(
                "Cannot validate credentials because the authenticator hasn't yet been configured"
            )
        if self._settings.ldap is None:
            raise ConfigurationError("Invalid authenticator configuration!")
        if not self._settings.ldap.server:
            raise ConfigurationError("You must specify an ldap server in the configuration!")
        return self._settings.ldap

    @staticmethod
    def _check_preauthentication_settings(directory: DirectorySettings) -> None:
        if directory.auth_password is None:
            raise ConfigurationError(
                "A password must be specified in the configuration for the authenticator user!"
            )
        if not directory.base:
            raise ConfigurationError(
                "A search base must be specified in the configuration when auth_user is set!"
            )
        if not directory.filter:
            raise ConfigurationError(
                "A search filter must be specified in the configuration when auth_user is set!"
            )

    def _bind_directly(self, client: DirectoryClient, attempt: DirectoryAttempt) -> ValidationResult:
        # The username has to be the entry's full DN for this to work
        client.authenticate(attempt.username, attempt.credentials.password)
        return ValidationResult(client.bind())

    def _bind_with_preauthentication(
        self,
        client: DirectoryClient,
        directory: DirectorySettings,
        attempt: DirectoryAttempt,
    ) -> ValidationResult:
        client.authenticate(directory.auth_user, directory.auth_password.get_secret_value())

        try:
            search_filter = (
                DirectoryFilter.construct(directory.filter)
                & DirectoryFilter.eq(directory.username_attribute, attempt.username)
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid ldap filter in the configuration: {e}") from e

        entry = client.bind_as(
            base=directory.base,
            password=attempt.credentials.password,
            filter=search_filter,
            attributes=directory.extra_attributes or None,
        )
        if not entry:
            return ValidationResult.reject()

        return ValidationResult.accept(
            self._extract_extra_attributes(entry, directory.extra_attributes)
        )

    @staticmethod
    def _extract_extra_attributes(entry: Mapping[str, Any], names) -> Dict[str, Any]:
        by_lower_name = {str(key).lower(): value for key, value in entry.items()}
        extracted = {}
        for name in names:
            value = by_lower_name.get(name.lower())
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                value = value[0] if len(value) == 1 else list(value)
            extracted[name] = value
        return extracted
