"""Bearer-token acquisition for sierra_api_client.

:class:`TokenManager` runs the OAuth2 Client Credentials grant and caches
the resulting token for the lifetime of one client instance.
"""

from sierra_api_client.auth.token_manager import TokenManager

__all__ = ["TokenManager"]
