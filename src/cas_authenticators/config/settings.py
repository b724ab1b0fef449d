"""
Configuration models for credential validators.

Validator configuration is loaded once by the server and handed to the
validators read-only. Parsing configuration files is the server's job; this
module only defines the schema and an environment-driven loader.
"""
from typing import Any, List, Mapping, Optional, Union
from functools import lru_cache
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.exceptions import ConfigurationError


DEFAULT_USERNAME_ATTRIBUTE = "uid"


class DirectorySettings(BaseModel):
    """Settings for the directory (LDAP) validator."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # Connection
    server: Optional[str] = Field(default=None, description="Directory host name")
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    use_ssl: bool = Field(default=False)
    connect_timeout: Optional[float] = Field(default=None, gt=0)

    # Entry lookup (pre-authenticated bind only)
    base: Optional[str] = Field(default=None, description="Search base DN")
    filter: Optional[str] = Field(default=None, description="Base filter ANDed with the username match")
    username_attribute: str = Field(default=DEFAULT_USERNAME_ATTRIBUTE, min_length=1)

    # Service account
    auth_user: Optional[str] = Field(default=None, description="Full DN of the service account")
    auth_password: Optional[SecretStr] = Field(default=None)

    # Username handling
    username_prefix: Optional[str] = Field(
        default=None,
        description="Appended to the username before binding (e.g. '@example.com')",
    )

    # Attributes copied from the matched entry into the result
    extra_attributes: List[str] = Field(default_factory=list)

    @property
    def has_service_account(self) -> bool:
        return bool(self.auth_user)


class ValidatorSettings(BaseModel):
    """Configuration scoped to one validator instance."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    authenticator: str = Field(default="ldap", description="Registered validator backend name")
    ldap: Optional[DirectorySettings] = Field(default=None)


class AuthenticatorSettings(BaseSettings):
    """Validator settings read from ``CAS_AUTH_*`` environment variables.

    Nested fields use ``__``, e.g. ``CAS_AUTH_LDAP__SERVER=ldap.example.com``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CAS_AUTH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    authenticator: str = Field(default="ldap")
    ldap: Optional[DirectorySettings] = Field(default=None)

    def to_validator_settings(self) -> ValidatorSettings:
        return ValidatorSettings(authenticator=self.authenticator, ldap=self.ldap)


def load_validator_settings(
    options: Union[None, ValidatorSettings, Mapping[str, Any]]
) -> Optional[ValidatorSettings]:
    """Coerce raw validator options into ``ValidatorSettings``.

    Args:
        options: None, an existing settings object, or a plain mapping

    Returns:
        Parsed settings, or None when no options were given

    Raises:
        ConfigurationError: If the options do not match the schema
    """
    if options is None or isinstance(options, ValidatorSettings):
        return options
    if isinstance(options, AuthenticatorSettings):
        return options.to_validator_settings()
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            "Invalid authenticator configuration!",
            details={"type": type(options).__name__},
        )
    try:
        return ValidatorSettings.model_validate(dict(options))
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid authenticator configuration!",
            details={"errors": [error["msg"] for error in e.errors()]},
        ) from e


@lru_cache()
def get_settings() -> AuthenticatorSettings:
    """Get cached settings instance."""
    return AuthenticatorSettings()
