"""Response wrapper -- uniform status and body access over :class:`httpx.Response`.

:class:`SierraApiResponse` is what every verb method of
:class:`~sierra_api_client.client.sync_client.SierraApiClient` returns.
Ordinary 4xx/5xx answers are returned rather than raised, so callers are
expected to check :attr:`SierraApiResponse.success` or
:attr:`SierraApiResponse.error`.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from sierra_api_client.exceptions import ResponseError


class SierraApiResponse:
    """Normalised view of one HTTP response.

    Args:
        response: The underlying :class:`httpx.Response`.

    Example::

        resp = client.get("patrons/12345")
        if resp.success:
            print(resp.body["id"])
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def __repr__(self) -> str:
        return f"<SierraApiResponse [{self.code}]>"

    @property
    def raw(self) -> httpx.Response:
        """The wrapped :class:`httpx.Response`."""
        return self._response

    @property
    def code(self) -> int:
        """HTTP status code."""
        return self._response.status_code

    @property
    def success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.code < 300

    @property
    def error(self) -> bool:
        """True for 4xx and 5xx status codes."""
        return self.code >= 400

    @property
    def headers(self) -> httpx.Headers:
        """Response headers (case-insensitive)."""
        return self._response.headers

    @property
    def text(self) -> str:
        """The raw body as a string."""
        return self._response.text

    @property
    def body(self) -> Any:
        """The response body, decoded according to its Content-Type.

        * 204 -- the raw (usually empty) body, never parsed.
        * ``application/json*`` -- the decoded JSON value.
        * anything else -- the raw body string.

        Raises:
            ResponseError: If the Content-Type declares JSON but the body
                does not parse.
        """
        if self.code == 204:
            return self.text

        content_type = self.headers.get("content-type", "").lower()
        if not content_type.startswith("application/json"):
            return self.text

        try:
            return self._response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ResponseError(
                f"Error parsing response ({self.code}): {self.text}",
                response=self,
            ) from exc
