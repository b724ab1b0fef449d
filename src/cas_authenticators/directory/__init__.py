"""Directory-service capability used by the LDAP validator."""

from .filters import DirectoryFilter
from .ldap3_client import DirectoryError, Ldap3DirectoryClient

__all__ = [
    "DirectoryFilter",
    "DirectoryError",
    "Ldap3DirectoryClient",
]
