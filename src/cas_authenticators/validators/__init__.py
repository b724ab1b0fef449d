"""Credential validator backends."""

from .ldap import BindStrategy, DirectoryValidator, normalize_username, denormalize_username
from .test import TestValidator
from .registry import register_validator, available_validators, create_validator

__all__ = [
    "BindStrategy",
    "DirectoryValidator",
    "normalize_username",
    "denormalize_username",
    "TestValidator",
    "register_validator",
    "available_validators",
    "create_validator",
]
