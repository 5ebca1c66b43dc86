"""Synchronous Sierra API client with token refresh and bounded retry.

This module provides :class:`SierraApiClient`, a blocking client built on
:class:`httpx.Client` that layers on:

- **Auth injection** -- an ``Authorization: Bearer`` header obtained through
  :class:`~sierra_api_client.auth.token_manager.TokenManager`.
- **401 recovery** -- the cached token is dropped, a fresh one is fetched
  and the request is resent.
- **Empty-response recovery** -- a 2xx with an empty body is treated as an
  incomplete answer and the same request is resent unchanged.
- **Retry with backoff** -- both recoveries share one budget of
  ``max_retries`` attempts with exponential delay (1 s, 2 s, 4 s).

Anything else, including ordinary 4xx/5xx answers, comes back as a
:class:`~sierra_api_client.client.response.SierraApiResponse`.
"""

from __future__ import annotations

import json
import threading
import time
from typing import Any, Callable, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from sierra_api_client.auth.token_manager import TokenManager
from sierra_api_client.client.response import SierraApiResponse
from sierra_api_client.config import resolve_config
from sierra_api_client.exceptions import AuthError, ClientError, ConnectionError_, ResponseError
from sierra_api_client.log import ClientLogger
from sierra_api_client.models import ClientConfig, RequestOptions

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")

OptionsArg = Union[RequestOptions, Mapping[str, Any], None]


class SierraApiClient:
    """Authenticated client for the Sierra REST API.

    Configuration is resolved once at construction: explicit values win over
    the ``SIERRA_*`` environment variables (see
    :func:`~sierra_api_client.config.resolve_config`).

    One instance owns one token and one retry counter.  Calls on the same
    instance are serialised with a lock; backoff sleeps block the caller.

    Args:
        config: Explicit settings as a mapping or a ready
            :class:`~sierra_api_client.models.ClientConfig`.
        http_client: Optional :class:`httpx.Client` to send requests with.
            When omitted one is created and closed by :meth:`close`.
        logger: Optional logger. Defaults to a JSON
            :class:`~sierra_api_client.log.ClientLogger` at the configured
            ``log_level``.
        sleep: Delay function used for backoff.
        environ: Environment to read fallbacks from (defaults to
            ``os.environ``).
        **overrides: Individual settings, applied over *config*.

    Example::

        with SierraApiClient(base_url="https://catalog.example.org/iii/sierra-api/v6/") as client:
            resp = client.get("patrons/12345")
    """

    def __init__(
        self,
        config: Union[Mapping[str, Any], ClientConfig, None] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[ClientLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> None:
        if isinstance(config, ClientConfig):
            if overrides:
                config = {**config.model_dump(), **overrides}
        else:
            config = {**(config or {}), **overrides}
        self._config = resolve_config(config, environ)
        self._logger = logger or ClientLogger(level=self._config.log_level)
        self._sleep = sleep
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self._config.timeout)
        self._tokens = TokenManager(self._config, self._http, self._logger)
        self._retries = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SierraApiClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    # ------------------------------------------------------------------ #
    # State
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def access_token(self) -> Optional[str]:
        """The cached bearer token, or ``None``."""
        return self._tokens.token

    @property
    def retries(self) -> int:
        """Retries consumed by the call in progress. Zero between calls."""
        return self._retries

    def authenticate(self) -> Optional[str]:
        """Force a fresh token, discarding any cached one."""
        with self._lock:
            return self._tokens.refresh()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def get(self, path: str, options: OptionsArg = None, **kwargs: Any) -> SierraApiResponse:
        """Send a GET request to ``base_url + path``."""
        return self.request("GET", path, options=options, **kwargs)

    def post(
        self, path: str, body: Any = None, options: OptionsArg = None, **kwargs: Any
    ) -> SierraApiResponse:
        """Send a POST request. *body* is JSON-encoded unless Content-Type says otherwise."""
        return self.request("POST", path, body, options=options, **kwargs)

    def put(
        self, path: str, body: Any = None, options: OptionsArg = None, **kwargs: Any
    ) -> SierraApiResponse:
        """Send a PUT request. *body* is JSON-encoded unless Content-Type says otherwise."""
        return self.request("PUT", path, body, options=options, **kwargs)

    def delete(self, path: str, options: OptionsArg = None, **kwargs: Any) -> SierraApiResponse:
        """Send a DELETE request to ``base_url + path``."""
        return self.request("DELETE", path, options=options, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: OptionsArg = None,
        **kwargs: Any,
    ) -> SierraApiResponse:
        """Send one logical API call, recovering from 401s and empty 2xx answers.

        Args:
            method: HTTP method. Only GET, POST, PUT and DELETE are supported.
            path: Path appended verbatim to the configured ``base_url``.
            body: Request body. Encoded as JSON when the effective
                Content-Type is ``application/json`` and the body is not
                already ``str`` or ``bytes``.
            options: :class:`~sierra_api_client.models.RequestOptions` or an
                equivalent mapping.
            **kwargs: ``authenticated`` / ``headers``, applied over *options*.

        Returns:
            The normalised response. 4xx/5xx answers with a body are
            returned, not raised.

        Raises:
            ClientError: Unsupported method or invalid options (before any
                network activity).
            ConnectionError_: The request could not be sent.
            AuthError: 401 on an unauthenticated call, or after the retry
                budget is spent.
            ResponseError: Empty 2xx body after the retry budget is spent.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ClientError(f"Unsupported method: {method}")

        opts = self._parse_options(options, kwargs)
        if method in ("POST", "PUT"):
            opts = opts.with_default_header("Content-Type", "application/json")
        content = self._encode_body(body, opts)
        url = f"{self._config.base_url}{path}"

        with self._lock:
            try:
                return self._execute(method, url, content, opts)
            finally:
                # Every terminal outcome leaves a full budget for the next call.
                self._retries = 0

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _parse_options(options: OptionsArg, overrides: Mapping[str, Any]) -> RequestOptions:
        if isinstance(options, RequestOptions):
            base = options.model_dump()
        else:
            base = dict(options or {})
        base.update(overrides)
        try:
            return RequestOptions.model_validate(base)
        except ValidationError as exc:
            raise ClientError(f"Invalid request options: {exc}") from exc

    @staticmethod
    def _encode_body(body: Any, opts: RequestOptions) -> Optional[Union[str, bytes]]:
        if body is None:
            return None
        if isinstance(body, (str, bytes)):
            return body
        content_type = (opts.get_header("Content-Type") or "").lower()
        if content_type.startswith("application/json"):
            try:
                return json.dumps(body)
            except (TypeError, ValueError) as exc:
                raise ClientError(f"Body is not JSON serialisable: {exc}") from exc
        return str(body)

    def _prepare(
        self, method: str, url: str, content: Optional[Union[str, bytes]], opts: RequestOptions
    ) -> httpx.Request:
        """Build the outgoing request, fetching a token first when needed."""
        headers = httpx.Headers()
        if opts.authenticated:
            token = self._tokens.ensure_token()
            if token is not None:
                headers["Authorization"] = f"Bearer {token}"
        # Caller headers last; httpx.Headers replaces names case-insensitively.
        headers.update(opts.headers)
        return self._http.build_request(method, url, headers=headers, content=content)

    def _send(self, request: httpx.Request) -> httpx.Response:
        self._logger.debug(
            f"SierraApiClient: {request.method} to Sierra api",
            uri=str(request.url),
            body=request.content.decode("utf-8", errors="replace") or None,
        )
        try:
            response = self._http.send(request)
        except httpx.TransportError as exc:
            raise ConnectionError_(
                f"Failed to {request.method} to {request.url}: {exc}"
            ) from exc
        self._logger.debug(
            "SierraApiClient: Got Sierra api response",
            code=response.status_code,
            body=response.text,
        )
        return response

    def _backoff(self, reason: str) -> None:
        self._retries += 1
        delay = 2 ** (self._retries - 1)
        self._logger.debug(
            f"SierraApiClient: Retrying after {reason}",
            retry=self._retries,
            delay=delay,
        )
        self._sleep(delay)

    def _execute(
        self, method: str, url: str, content: Optional[Union[str, bytes]], opts: RequestOptions
    ) -> SierraApiResponse:
        """Run the send / classify / retry loop for one logical call."""
        ceiling = self._config.max_retries
        request = self._prepare(method, url, content, opts)

        while True:
            response = self._send(request)
            status = response.status_code

            if status == 401:
                # Likely an expired token; drop it so the next fetch is fresh.
                self._tokens.invalidate()
                self._logger.debug("SierraApiClient: Unauthorized", code=401, body=response.text)
                if not opts.authenticated or self._retries >= ceiling:
                    exhausted = opts.authenticated
                    message = (
                        "Maximum retries exceeded" if exhausted else f"Got a 401: {response.text}"
                    )
                    raise AuthError(
                        message,
                        body=response.text,
                        retries_exhausted=exhausted,
                        response=SierraApiResponse(response),
                    )
                self._backoff("401")
                request = self._prepare(method, url, content, opts)
                continue

            # 204 announces an empty body, so only other 2xx count as incomplete.
            if 200 <= status < 300 and status != 204 and response.content == b"":
                if self._retries >= ceiling:
                    raise ResponseError(
                        f"Empty response body ({status}) after {ceiling} retries",
                        response=SierraApiResponse(response),
                    )
                self._backoff(f"empty {status} response")
                continue

            return SierraApiResponse(response)
