"""HTTP client module for sierra_api_client.

Classes:
    :class:`SierraApiClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`SierraApiResponse` -- normalised response returned by every call.
"""

from sierra_api_client.client.response import SierraApiResponse
from sierra_api_client.client.sync_client import SierraApiClient

__all__ = ["SierraApiClient", "SierraApiResponse"]
