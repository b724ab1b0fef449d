"""Pytest configuration and fixtures for cas-authenticators tests."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from cas_authenticators.directory import DirectoryError
from cas_authenticators.config import ValidatorSettings


class FakeDirectory:
    """In-memory directory standing in for a real server.

    Holds DN -> password for binds and a list of entries for bind_as lookups.
    Every client it hands out is recorded so tests can inspect the calls.
    """

    def __init__(self):
        self.passwords: Dict[str, str] = {}
        self.entries: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.clients: List["FakeDirectoryClient"] = []

    def add_entry(self, dn: str, password: str, **attributes: Any) -> None:
        self.passwords[dn] = password
        self.entries.append({"dn": dn, **attributes})

    def __call__(self, host, port=None, **options) -> "FakeDirectoryClient":
        client = FakeDirectoryClient(self, host, port, options)
        self.clients.append(client)
        return client

    @property
    def calls(self) -> List[Tuple]:
        return [call for client in self.clients for call in client.calls]


class FakeDirectoryClient:
    """Recording implementation of the DirectoryClient protocol."""

    def __init__(self, directory: FakeDirectory, host, port, options):
        self.directory = directory
        self.host = host
        self.port = port
        self.options = options
        self.principal = None
        self.secret = None
        self.calls: List[Tuple] = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def authenticate(self, principal, secret):
        self.calls.append(("authenticate", principal, secret))
        self.principal = principal
        self.secret = secret

    def bind(self):
        self.calls.append(("bind", self.principal))
        self._maybe_fail()
        return self._accepts(self.principal, self.secret)

    def bind_as(self, base, password, filter, attributes=None):
        self.calls.append(("bind_as", base, str(filter), attributes))
        self._maybe_fail()
        if not self._accepts(self.principal, self.secret):
            raise DirectoryError("Service account bind refused: invalidCredentials")

        username = str(filter).rsplit("=", 1)[-1].rstrip(")")
        for entry in self.directory.entries:
            if entry.get("uid") == username or entry.get("sAMAccountName") == username:
                if self._accepts(entry["dn"], password):
                    return dict(entry)
                return None
        return None

    def close(self):
        self.calls.append(("close",))
        self.closed = True

    def _accepts(self, principal, secret) -> bool:
        return bool(secret) and self.directory.passwords.get(principal) == secret

    def _maybe_fail(self):
        if self.directory.error is not None:
            raise self.directory.error


@pytest.fixture
def fake_directory():
    """Empty fake directory usable as a client factory."""
    return FakeDirectory()


@pytest.fixture
def direct_bind_settings():
    """Directory settings without a service account."""
    return ValidatorSettings.model_validate({
        "authenticator": "ldap",
        "ldap": {"server": "ldap.example.com", "port": 389},
    })


@pytest.fixture
def preauth_settings():
    """Directory settings with a service account."""
    return ValidatorSettings.model_validate({
        "authenticator": "ldap",
        "ldap": {
            "server": "ldap.example.com",
            "port": 389,
            "base": "ou=people,dc=example,dc=com",
            "filter": "(objectClass=person)",
            "auth_user": "cn=cas,ou=services,dc=example,dc=com",
            "auth_password": "service-secret",
            "extra_attributes": ["mail", "memberOf"],
        },
    })
