"""Exception hierarchy for sierra_api_client.

All exceptions inherit from :class:`SierraApiError`, so callers that do not
care about the failure class can catch a single type.  Every error raised
by :class:`~sierra_api_client.client.sync_client.SierraApiClient` belongs to
this hierarchy.

Subclass hierarchy::

    SierraApiError
    +-- ConfigError          missing configuration at construction
    +-- ClientError          unsupported verb
    |   +-- ConnectionError_ transport failure (DNS, connect, timeout)
    +-- AuthError            401 that could not be recovered
    +-- ResponseError        persistent empty 2xx, or malformed JSON body
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from sierra_api_client.client.response import SierraApiResponse


class SierraApiError(Exception):
    """Base exception for all sierra_api_client errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(SierraApiError):
    """Raised when a required setting is neither passed explicitly nor set in the environment."""

    def __init__(self, message: str, field: Optional[str] = None, env_var: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.env_var = env_var


class ClientError(SierraApiError):
    """Raised for failures on the client side of an exchange (e.g. an unsupported HTTP method)."""


class ConnectionError_(ClientError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.  Never retried by the client.
    """


class AuthError(SierraApiError):
    """Raised when the API keeps answering 401.

    Either the retry budget was spent refreshing the token, or the call was
    made with ``authenticated=False`` and so could not be recovered at all.

    Args:
        message: Human-readable error description.
        body: Raw body of the final 401 response.
        retries_exhausted: ``True`` when the error is the result of hitting
            the retry ceiling.
        response: The final response, for diagnostics.
    """

    def __init__(
        self,
        message: str,
        body: str = "",
        retries_exhausted: bool = False,
        response: Optional[SierraApiResponse] = None,
    ):
        super().__init__(message)
        self.body = body
        self.retries_exhausted = retries_exhausted
        self.response = response


class ResponseError(SierraApiError):
    """Raised when a response cannot be used: empty 2xx bodies that persist, or unparseable JSON.

    Args:
        message: Human-readable error description.
        response: The offending response.
    """

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response
