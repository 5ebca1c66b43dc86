"""OAuth2 Client Credentials token manager.

:class:`TokenManager` performs the Client Credentials grant
(:rfc:`6749` section 4.4) against the configured ``oauth_url`` and caches
the resulting bearer token in memory.

There is no local expiry tracking: a token is considered valid until the
API answers 401, at which point the request executor calls
:meth:`TokenManager.invalidate` and asks for a fresh one.

A non-200 answer from the token endpoint does not raise. The token simply
stays unset and the following authenticated call surfaces whatever error
the API returns for it.
"""

from __future__ import annotations

import json
from typing import Optional

import httpx

from sierra_api_client.exceptions import ConnectionError_
from sierra_api_client.log import ClientLogger
from sierra_api_client.models import ClientConfig


class TokenManager:
    """Obtain and cache a bearer token for one client instance.

    Args:
        config: Resolved client configuration (``oauth_url``,
            ``client_id`` and ``client_secret`` are used).
        http: The HTTP client used to reach the token endpoint.
        logger: Logger for diagnostics.
    """

    def __init__(self, config: ClientConfig, http: httpx.Client, logger: ClientLogger) -> None:
        self._config = config
        self._http = http
        self._logger = logger
        self._access_token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        """The cached bearer token, or ``None``."""
        return self._access_token

    @property
    def has_token(self) -> bool:
        return self._access_token is not None

    def ensure_token(self) -> Optional[str]:
        """Fetch a token unless one is already cached.

        Returns:
            The cached token, or ``None`` if the token endpoint refused.

        Raises:
            ConnectionError_: If the token endpoint cannot be reached.
        """
        if self._access_token is not None:
            return self._access_token

        self._logger.debug(
            "SierraApiClient: Authenticating with client_id",
            client_id=self._config.client_id,
        )
        try:
            response = self._http.post(
                self._config.oauth_url,
                auth=(self._config.client_id, self._config.client_secret),
                data={"grant_type": "client_credentials"},
            )
        except httpx.TransportError as exc:
            raise ConnectionError_(
                f"Failed to post to {self._config.oauth_url}: {exc}"
            ) from exc

        if response.status_code != 200:
            self._logger.warning(
                "SierraApiClient: Token request failed",
                code=response.status_code,
                body=response.text,
            )
            return None

        try:
            token = response.json().get("access_token")
        except (json.JSONDecodeError, ValueError, AttributeError):
            token = None
        if not token:
            self._logger.warning(
                "SierraApiClient: Token response missing 'access_token'",
                body=response.text,
            )
            return None

        self._access_token = str(token)
        return self._access_token

    def invalidate(self) -> None:
        """Forget the cached token so the next authenticated call fetches a new one."""
        self._access_token = None

    def refresh(self) -> Optional[str]:
        """Discard the cached token and fetch a new one."""
        self.invalidate()
        return self.ensure_token()
