"""Fixed-rule validator for exercising a server's login flow.

Accepts ``testuser`` / ``testpassword`` and nothing else. The username
``do_error`` raises ``AuthenticationBackendError`` so callers can test their
error handling.
"""

import logging
from typing import Any, Mapping, Union

from ..config.settings import ValidatorSettings
from ..core.credentials import extract_credentials
from ..core.exceptions import AuthenticationBackendError
from ..core.results import ValidationResult

logger = logging.getLogger(__name__)

ACCEPTED_USERNAME = "testuser"
ACCEPTED_PASSWORD = "testpassword"
ERROR_USERNAME = "do_error"


class TestValidator:
    """Deterministic validator with no I/O."""

    __test__ = False

    def __init__(self, options: Union[None, ValidatorSettings, Mapping[str, Any]] = None):
        # Accepted for signature parity with the other backends; never read
        self._options = options

    def validate(self, credentials: Mapping[str, Any]) -> ValidationResult:
        submitted = extract_credentials(credentials)

        if submitted.username == ERROR_USERNAME:
            raise AuthenticationBackendError(
                f"Username is '{ERROR_USERNAME}'!",
                details={"reason": "requested_error"},
            )

        # Populated whether or not the attempt is accepted
        extra_attributes = {
            "test_string": "testing!",
            "test_numeric": 123.45,
            "test_serialized": {"foo": "bar", "alpha": [1, 2, 3]},
        }

        accepted = (
            submitted.username == ACCEPTED_USERNAME
            and submitted.password == ACCEPTED_PASSWORD
        )
        logger.debug(f"Test validator {'accepted' if accepted else 'rejected'} {submitted.username}")
        return ValidationResult(accepted, extra_attributes)
