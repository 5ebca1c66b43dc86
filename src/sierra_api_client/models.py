"""Pydantic models shared across sierra_api_client modules.

:class:`ClientConfig` is the resolved, immutable client configuration
produced by :func:`~sierra_api_client.config.resolve_config`.
:class:`RequestOptions` carries the per-call settings accepted by the verb
methods of :class:`~sierra_api_client.client.sync_client.SierraApiClient`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("debug", "info", "warning", "error")
"""Accepted log levels, least to most severe."""


class ClientConfig(BaseModel):
    """Resolved client configuration. Built once per client and never mutated.

    Example::

        ClientConfig(
            base_url="https://catalog.example.org/iii/sierra-api/v6/",
            oauth_url="https://catalog.example.org/iii/sierra-api/v6/token",
            client_id="my-client",
            client_secret="s3cret",
        )
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(min_length=1, description="Prefix every request path is appended to")
    oauth_url: str = Field(min_length=1, description="OAuth2 token endpoint")
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1, repr=False)
    log_level: str = Field(default="info", description="debug, info, warning or error")
    timeout: float = Field(default=30.0, gt=0, description="Per-exchange timeout in seconds")
    max_retries: int = Field(default=3, ge=0, description="Retry ceiling shared by 401 and empty-body retries")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        level = str(value).lower()
        if level == "warn":
            level = "warning"
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
        return level


class RequestOptions(BaseModel):
    """Per-call request options.

    ``headers`` keeps the caller's spelling of each header name; use
    :meth:`get_header` for case-insensitive lookup.
    """

    model_config = ConfigDict(extra="forbid")

    authenticated: bool = True
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def _stringify_headers(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        return {str(k): str(v) for k, v in dict(value).items()}

    def get_header(self, name: str) -> Optional[str]:
        """Return the value of header *name*, ignoring case, or ``None``."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def with_default_header(self, name: str, value: str) -> RequestOptions:
        """Return a copy with *name* set to *value* unless the caller already set it."""
        if self.get_header(name) is not None:
            return self
        return self.model_copy(update={"headers": {**self.headers, name: value}})
