"""
Account Errors
--------------

The failure kinds a caller of the account core can observe.

Local errors (ConfigError, ValidationError) never touch the network.
Remote errors (RemoteFetchError, RemoteWriteError) are produced at the
flow boundary from transport failures and non-success responses.
RemoteServiceError is the adapters' raw "the service said no" signal and
is not meant to escape the flows.
"""

from typing import Dict, Optional


class AccountHubError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigError(AccountHubError):
    EMPTY_ENDPOINT = "EmptyEndpoint"
    INVALID_ENDPOINT = "InvalidEndpoint"


class ValidationError(AccountHubError):
    """
    Raised before submission. `fields` maps every failing field name
    to a reason, so all problems are reported at once.
    """

    def __init__(self, fields: Dict[str, str]):
        self.fields = dict(fields)
        names = ", ".join(sorted(self.fields))
        super().__init__(f"Please fill in all required fields: {names}", code="ValidationError")


class RemoteFetchError(AccountHubError):
    """Read path failed; the directory has been cleared."""


class RemoteWriteError(AccountHubError):
    """Write path failed; local input and the current snapshot are untouched."""
    NOT_FOUND = "NotFound"

    @property
    def not_found(self) -> bool:
        return self.code == self.NOT_FOUND


class RemoteServiceError(AccountHubError):
    """Non-2xx response from the account service."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message, code=str(status_code))
        self.status_code = status_code
