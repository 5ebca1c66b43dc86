"""sierra_api_client -- OAuth2 client-credentials HTTP client for the Sierra REST API.

The client fetches a bearer token with the client-credentials grant, attaches
it to every authenticated call, refreshes it when the API answers 401, and
retries empty 2xx answers, all within one shared budget of three retries.

Typical usage::

    from sierra_api_client import SierraApiClient

    client = SierraApiClient()          # reads SIERRA_* environment variables
    resp = client.get("patrons/12345")
    if resp.success:
        patron = resp.body

Modules:
    client: The request executor and the response wrapper.
    auth: Token acquisition and caching.
    models: Pydantic models for configuration and per-call options.
    config: Override-over-environment configuration resolution.
    exceptions: Exception hierarchy.
    log: Level-filtered structured logging.
"""

from sierra_api_client.client import SierraApiClient, SierraApiResponse
from sierra_api_client.exceptions import (
    AuthError,
    ClientError,
    ConfigError,
    ConnectionError_,
    ResponseError,
    SierraApiError,
)
from sierra_api_client.models import ClientConfig, RequestOptions

__version__ = "1.0.0"

__all__ = [
    "AuthError",
    "ClientConfig",
    "ClientError",
    "ConfigError",
    "ConnectionError_",
    "RequestOptions",
    "ResponseError",
    "SierraApiClient",
    "SierraApiError",
    "SierraApiResponse",
]
