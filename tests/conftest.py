"""Shared test fixtures for sierra_api_client.

Provides a fake Sierra deployment (token endpoint plus API routes) served
through :class:`httpx.MockTransport`, a recording sleep function, and a
client factory wired to both.  These fixtures are automatically
discovered by pytest and available to all test modules without explicit
imports.
"""

from __future__ import annotations

import json
from io import StringIO
from typing import Any, Callable, Optional

import httpx
import pytest

from sierra_api_client.client.sync_client import SierraApiClient
from sierra_api_client.log import ClientLogger


BASE_URL = "https://example.com/iii/"
OAUTH_URL = "https://example.com/token"
CLIENT_ID = "fake-client"
CLIENT_SECRET = "fake-secret"

JSON_TYPE = "application/json;charset=UTF-8"


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


def reply(
    status: int = 200,
    body: Any = "",
    content_type: Optional[str] = None,
) -> Callable[[], httpx.Response]:
    """Build a factory for a canned response.

    Non-string bodies are JSON-encoded and default to a JSON Content-Type.
    A fresh :class:`httpx.Response` is produced on every call so the same
    canned reply can be served repeatedly.
    """
    if not isinstance(body, str):
        body = json.dumps(body)
        content_type = content_type or JSON_TYPE

    def _build() -> httpx.Response:
        headers = {"content-type": content_type} if content_type else {}
        return httpx.Response(status, content=body.encode("utf-8"), headers=headers)

    return _build


class FakeSierra:
    """In-memory stand-in for a Sierra deployment.

    The token endpoint hands out ``token-1``, ``token-2`` ... unless
    :attr:`token_replies` holds queued replies.  API routes serve their
    queued replies in order and keep repeating the last one.
    """

    def __init__(self) -> None:
        self.token_replies: list[Callable[[], httpx.Response]] = []
        self.token_requests: list[httpx.Request] = []
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[Callable[[], httpx.Response]]] = {}
        self._issued = 0

    def route(self, method: str, path: str, *replies: Callable[[], httpx.Response]) -> None:
        self._routes[(method.upper(), BASE_URL + path)] = list(replies)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        url = BASE_URL + path
        return [r for r in self.requests if r.method == method.upper() and str(r.url) == url]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == OAUTH_URL:
            self.token_requests.append(request)
            if self.token_replies:
                return self.token_replies.pop(0)()
            self._issued += 1
            return reply(200, {"access_token": f"token-{self._issued}"})()

        self.requests.append(request)
        queue = self._routes.get((request.method, str(request.url)))
        if not queue:
            return httpx.Response(404, text="not found")
        factory = queue.pop(0) if len(queue) > 1 else queue[0]
        return factory()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def sierra_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the SIERRA_* variables at the fake deployment for every test."""
    monkeypatch.setenv("SIERRA_API_BASE_URL", BASE_URL)
    monkeypatch.setenv("SIERRA_OAUTH_ID", CLIENT_ID)
    monkeypatch.setenv("SIERRA_OAUTH_SECRET", CLIENT_SECRET)
    monkeypatch.setenv("SIERRA_OAUTH_URL", OAUTH_URL)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_sierra() -> FakeSierra:
    return FakeSierra()


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the client under test, in order."""
    return []


@pytest.fixture
def log_stream() -> StringIO:
    return StringIO()


@pytest.fixture
def make_client(
    fake_sierra: FakeSierra, sleeps: list[float], log_stream: StringIO
) -> Callable[..., SierraApiClient]:
    """Factory for clients talking to :class:`FakeSierra` without real delays."""

    def _make(**overrides: Any) -> SierraApiClient:
        http = httpx.Client(transport=httpx.MockTransport(fake_sierra.handler))
        logger = ClientLogger(level=overrides.pop("log_level", "debug"), stream=log_stream)
        return SierraApiClient(
            http_client=http,
            logger=logger,
            sleep=sleeps.append,
            **overrides,
        )

    return _make


@pytest.fixture
def client(make_client: Callable[..., SierraApiClient]) -> SierraApiClient:
    return make_client()
