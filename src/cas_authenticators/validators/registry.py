"""Validator backend registry.

The server picks a backend once, at configuration time, by name.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Union

from ..config.settings import ValidatorSettings, load_validator_settings
from ..core.exceptions import ConfigurationError
from ..core.protocols import CredentialValidator
from .ldap import DirectoryValidator
from .test import TestValidator

logger = logging.getLogger(__name__)

ValidatorFactory = Callable[[ValidatorSettings], CredentialValidator]

_REGISTRY: Dict[str, ValidatorFactory] = {
    "ldap": DirectoryValidator,
    "test": TestValidator,
}


def register_validator(name: str, factory: ValidatorFactory) -> None:
    """Register a validator backend under ``name`` (case-insensitive).

    Args:
        name: Backend name used in ``ValidatorSettings.authenticator``
        factory: Callable building the validator from its settings
    """
    key = name.strip().lower()
    if not key:
        raise ValueError("Validator name cannot be empty")
    if key in _REGISTRY:
        logger.warning(f"Replacing registered validator backend '{key}'")
    _REGISTRY[key] = factory


def available_validators() -> List[str]:
    return sorted(_REGISTRY)


def create_validator(
    settings: Union[ValidatorSettings, Mapping[str, Any]]
) -> CredentialValidator:
    """Build the validator named by ``settings.authenticator``.

    Raises:
        ConfigurationError: If no settings were given or the backend is unknown
    """
    settings = load_validator_settings(settings)
    if settings is None:
        raise ConfigurationError("Validator settings are required")

    key = settings.authenticator.strip().lower()
    factory = _REGISTRY.get(key)
    if factory is None:
        raise ConfigurationError(
            f"Unknown authenticator '{settings.authenticator}'",
            details={"available": available_validators()},
        )

    logger.debug(f"Creating '{key}' validator")
    return factory(settings)
