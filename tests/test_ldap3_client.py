"""Tests for the ldap3-backed directory client."""

from unittest.mock import MagicMock, patch

import pytest
from ldap3.core.exceptions import LDAPSocketOpenError

from cas_authenticators import AuthenticationBackendError, DirectoryValidator
from cas_authenticators.directory import DirectoryError, DirectoryFilter, Ldap3DirectoryClient
from cas_authenticators.directory import ldap3_client


def make_connection(bind_result=True, response=None, result=None):
    connection = MagicMock()
    connection.bind.return_value = bind_result
    connection.response = response
    if result is None:
        result = (
            {"result": 0, "description": "success"}
            if bind_result
            else {"result": 49, "description": "invalidCredentials"}
        )
    connection.result = result
    return connection


@pytest.fixture
def server_cls():
    with patch.object(ldap3_client, "Server") as server:
        yield server


@pytest.fixture
def connection_cls():
    with patch.object(ldap3_client, "Connection") as connection:
        yield connection


class TestClientSetup:

    def test_builds_server_from_settings(self, server_cls):
        Ldap3DirectoryClient("ldap.example.com", 636, use_ssl=True, connect_timeout=5)

        server_cls.assert_called_once_with(
            "ldap.example.com", port=636, use_ssl=True, connect_timeout=5
        )

    def test_requires_host(self, server_cls):
        with pytest.raises(ValueError):
            Ldap3DirectoryClient("")


class TestBind:

    def test_accepted(self, server_cls, connection_cls):
        connection_cls.return_value = make_connection(True)
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("uid=jdoe,dc=example,dc=com", "secret")

        assert client.bind() is True
        connection_cls.assert_called_once_with(
            server_cls.return_value,
            user="uid=jdoe,dc=example,dc=com",
            password="secret",
            read_only=True,
            raise_exceptions=False,
        )

    def test_refused(self, server_cls, connection_cls):
        connection_cls.return_value = make_connection(False)
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("uid=jdoe,dc=example,dc=com", "wrong")

        assert client.bind() is False

    @pytest.mark.parametrize("result", [
        {"result": 51, "description": "busy"},
        {"result": 52, "description": "unavailable"},
        {"result": 53, "description": "unwillingToPerform"},
        {"result": 50, "description": "insufficientAccessRights"},
    ])
    def test_server_refusal_other_than_invalid_credentials_is_error(self, server_cls, connection_cls, result):
        connection_cls.return_value = make_connection(False, result=result)
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("uid=jdoe,dc=example,dc=com", "secret")

        with pytest.raises(DirectoryError, match=result["description"]):
            client.bind()

    def test_transport_failure(self, server_cls, connection_cls):
        connection = make_connection()
        connection.bind.side_effect = LDAPSocketOpenError("socket connection error")
        connection_cls.return_value = connection
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("uid=jdoe,dc=example,dc=com", "secret")

        with pytest.raises(DirectoryError, match="socket connection error") as exc_info:
            client.bind()

        assert isinstance(exc_info.value.__cause__, LDAPSocketOpenError)


class TestBindAs:

    FILTER = DirectoryFilter("(&(objectClass=person)(uid=jdoe))")
    ENTRY = {
        "type": "searchResEntry",
        "dn": "uid=jdoe,ou=people,dc=example,dc=com",
        "attributes": {"mail": ["jdoe@example.com"]},
    }

    def test_binds_as_matched_entry(self, server_cls, connection_cls):
        service = make_connection(True, response=[self.ENTRY, {"type": "searchResRef"}])
        user = make_connection(True)
        connection_cls.side_effect = [service, user]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        entry = client.bind_as("ou=people,dc=example,dc=com", "secret", self.FILTER, ["mail"])

        assert entry == {
            "mail": ["jdoe@example.com"],
            "dn": "uid=jdoe,ou=people,dc=example,dc=com",
        }
        service.search.assert_called_once_with(
            search_base="ou=people,dc=example,dc=com",
            search_filter="(&(objectClass=person)(uid=jdoe))",
            search_scope=ldap3_client.SUBTREE,
            attributes=["mail"],
            size_limit=1,
        )
        assert connection_cls.call_args_list[1].kwargs["user"] == "uid=jdoe,ou=people,dc=example,dc=com"
        assert connection_cls.call_args_list[1].kwargs["password"] == "secret"

    def test_wrong_password(self, server_cls, connection_cls):
        connection_cls.side_effect = [
            make_connection(True, response=[self.ENTRY]),
            make_connection(False),
        ]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        assert client.bind_as("dc=example,dc=com", "wrong", self.FILTER) is None

    def test_no_match(self, server_cls, connection_cls):
        service = make_connection(True, response=[])
        connection_cls.side_effect = [service]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        assert client.bind_as("dc=example,dc=com", "secret", self.FILTER) is None
        assert service.search.call_args.kwargs["attributes"] == ldap3_client.NO_ATTRIBUTES

    def test_service_account_refused(self, server_cls, connection_cls):
        service = make_connection(False)
        connection_cls.side_effect = [service]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "wrong")

        with pytest.raises(DirectoryError, match="Service account bind refused: invalidCredentials"):
            client.bind_as("dc=example,dc=com", "secret", self.FILTER)

        service.search.assert_not_called()


    @pytest.mark.parametrize("result", [
        {"result": 52, "description": "unavailable"},
        {"result": 32, "description": "noSuchObject"},
    ])
    def test_failed_search_is_error(self, server_cls, connection_cls, result):
        connection_cls.side_effect = [make_connection(True, response=[], result=result)]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        with pytest.raises(DirectoryError, match=f"Search under dc=example,dc=com failed: {result['description']}"):
            client.bind_as("dc=example,dc=com", "secret", self.FILTER)

    def test_size_limit_keeps_first_match(self, server_cls, connection_cls):
        service = make_connection(
            True,
            response=[self.ENTRY],
            result={"result": 4, "description": "sizeLimitExceeded"},
        )
        connection_cls.side_effect = [service, make_connection(True)]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        entry = client.bind_as("dc=example,dc=com", "secret", self.FILTER)

        assert entry["dn"] == "uid=jdoe,ou=people,dc=example,dc=com"

    def test_busy_server_on_user_bind_is_error(self, server_cls, connection_cls):
        connection_cls.side_effect = [
            make_connection(True, response=[self.ENTRY]),
            make_connection(False, result={"result": 51, "description": "busy"}),
        ]
        client = Ldap3DirectoryClient("ldap.example.com")
        client.authenticate("cn=cas,dc=example,dc=com", "service-secret")

        with pytest.raises(DirectoryError, match="busy"):
            client.bind_as("dc=example,dc=com", "secret", self.FILTER)


class TestClose:

    def test_context_manager_unbinds_every_connection(self, server_cls, connection_cls):
        service = make_connection(True, response=[TestBindAs.ENTRY])
        user = make_connection(True)
        connection_cls.side_effect = [service, user]

        with Ldap3DirectoryClient("ldap.example.com") as client:
            client.authenticate("cn=cas,dc=example,dc=com", "service-secret")
            client.bind_as("dc=example,dc=com", "secret", TestBindAs.FILTER)

        service.unbind.assert_called_once()
        user.unbind.assert_called_once()

    def test_unbinds_after_failure(self, server_cls, connection_cls):
        connection = make_connection()
        connection.bind.side_effect = LDAPSocketOpenError("refused")
        connection_cls.return_value = connection

        with pytest.raises(DirectoryError):
            with Ldap3DirectoryClient("ldap.example.com") as client:
                client.authenticate("uid=jdoe", "secret")
                client.bind()

        connection.unbind.assert_called_once()


class TestThroughDirectoryValidator:
    """Server-side failures reach the caller as backend errors."""

    def test_busy_server_is_backend_error(self, server_cls, connection_cls):
        connection_cls.return_value = make_connection(False, result={"result": 51, "description": "busy"})
        validator = DirectoryValidator({"ldap": {"server": "ldap.example.com"}})

        with pytest.raises(AuthenticationBackendError, match="busy"):
            validator.validate({"username": "jdoe", "password": "secret"})

    def test_unavailable_search_is_backend_error(self, server_cls, connection_cls):
        connection_cls.return_value = make_connection(
            True, response=None, result={"result": 52, "description": "unavailable"}
        )
        validator = DirectoryValidator({"ldap": {
            "server": "ldap.example.com",
            "base": "dc=example,dc=com",
            "filter": "(objectClass=person)",
            "auth_user": "cn=cas,dc=example,dc=com",
            "auth_password": "service-secret",
        }})

        with pytest.raises(AuthenticationBackendError, match="unavailable"):
            validator.validate({"username": "jdoe", "password": "secret"})

    def test_invalid_credentials_is_rejection(self, server_cls, connection_cls):
        connection_cls.return_value = make_connection(False)
        validator = DirectoryValidator({"ldap": {"server": "ldap.example.com"}})

        assert not validator.validate({"username": "jdoe", "password": "wrong"})
