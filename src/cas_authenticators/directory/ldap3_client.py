"""ldap3-backed directory client."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ldap3 import Connection, Server, SUBTREE, NO_ATTRIBUTES
from ldap3.core.exceptions import LDAPException
from ldap3.core.results import (
    RESULT_SUCCESS,
    RESULT_INVALID_CREDENTIALS,
    RESULT_SIZE_LIMIT_EXCEEDED,
)

from .filters import DirectoryFilter

logger = logging.getLogger(__name__)

# size_limit=1 ends a search with more than one match in sizeLimitExceeded
SEARCH_OK_RESULTS = frozenset({RESULT_SUCCESS, RESULT_SIZE_LIMIT_EXCEEDED})


class DirectoryError(Exception):
    """Raised when the directory could not be reached or answered unexpectedly."""
    pass


class Ldap3DirectoryClient:
    """Directory client following maximum separation principle.

    Handles ONLY the directory exchange for one validation call: simple binds
    and the search-then-bind sequence used to bind as a looked-up entry.
    Does not decide whether a login is valid - that's handled by validators.

    Every connection opened through the client is released by ``close()``,
    which also runs when the client is used as a context manager.
    """

    def __init__(
        self,
        host: str,
        port: Optional[int] = None,
        *,
        use_ssl: bool = False,
        connect_timeout: Optional[float] = None,
    ):
        """Initialize directory client.

        Args:
            host: Directory server host name
            port: Server port; ldap3 picks 389/636 when omitted
            use_ssl: Connect with LDAPS
            connect_timeout: Socket connect timeout in seconds
        """
        if not host:
            raise ValueError("Directory host is required")
        self.host = host
        self.port = port
        try:
            self._server = Server(host, port=port, use_ssl=use_ssl, connect_timeout=connect_timeout)
        except LDAPException as e:
            raise DirectoryError(str(e)) from e
        self._principal: Optional[str] = None
        self._secret: Optional[str] = None
        self._connections: List[Connection] = []

    def __enter__(self) -> "Ldap3DirectoryClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def authenticate(self, principal: str, secret: str) -> None:
        """Store the credentials used by the next bind."""
        self._principal = principal
        self._secret = secret

    def bind(self) -> bool:
        """Bind with the stored credentials.

        Returns:
            True if the directory accepted the credentials

        Raises:
            DirectoryError: If the exchange itself failed
        """
        return self._bind(self._principal, self._secret)

    def bind_as(
        self,
        base: str,
        password: str,
        filter: DirectoryFilter,
        attributes: Optional[Sequence[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Bind as the first entry under ``base`` matching ``filter``.

        The stored credentials (normally a service account) are used for the
        search. A refused service-account bind is an error, not a rejection.

        Args:
            base: Search base DN
            password: Password to bind the matched entry with
            filter: Search filter selecting the entry
            attributes: Entry attributes to return; none when omitted

        Returns:
            The entry's attributes (with ``dn``) if its bind succeeded, else None

        Raises:
            DirectoryError: If the service account is refused or the exchange fails
        """
        try:
            connection = self._open(self._principal, self._secret)
            if not connection.bind():
                raise DirectoryError(
                    f"Service account bind refused: {self._describe(connection)}"
                )

            connection.search(
                search_base=base,
                search_filter=str(filter),
                search_scope=SUBTREE,
                attributes=list(attributes) if attributes else NO_ATTRIBUTES,
                size_limit=1,
            )
            if self._result_code(connection) not in SEARCH_OK_RESULTS:
                raise DirectoryError(
                    f"Search under {base} failed: {self._describe(connection)}"
                )
            entries = [
                entry for entry in (connection.response or [])
                if entry.get("type") == "searchResEntry"
            ]
        except LDAPException as e:
            raise DirectoryError(str(e)) from e

        if not entries:
            logger.debug(f"No directory entry under {base} matches {filter}")
            return None

        entry = entries[0]
        if not self._bind(entry["dn"], password):
            return None

        found = dict(entry.get("attributes") or {})
        found["dn"] = entry["dn"]
        return found

    def close(self) -> None:
        """Unbind every connection opened by this client."""
        while self._connections:
            connection = self._connections.pop()
            try:
                connection.unbind()
            except LDAPException as e:
                logger.debug(f"Ignoring unbind failure on {self.host}: {e}")

    def _bind(self, principal: Optional[str], secret: Optional[str]) -> bool:
        try:
            connection = self._open(principal, secret)
            accepted = connection.bind()
        except LDAPException as e:
            raise DirectoryError(str(e)) from e

        if accepted:
            return True
        # Only invalidCredentials is a refusal; busy, unavailable and the like are outages
        if self._result_code(connection) != RESULT_INVALID_CREDENTIALS:
            raise DirectoryError(f"Bind failed for {principal}: {self._describe(connection)}")
        logger.debug(f"Bind refused for {principal}: {self._describe(connection)}")
        return False

    def _open(self, principal: Optional[str], secret: Optional[str]) -> Connection:
        connection = Connection(
            self._server,
            user=principal,
            password=secret,
            read_only=True,
            raise_exceptions=False,
        )
        self._connections.append(connection)
        return connection

    @staticmethod
    def _result_code(connection: Connection) -> Optional[int]:
        return (connection.result or {}).get("result")

    @staticmethod
    def _describe(connection: Connection) -> str:
        result = connection.result or {}
        return result.get("description") or result.get("message") or "unknown result"
