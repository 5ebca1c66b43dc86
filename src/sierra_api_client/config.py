"""Configuration resolution with override-over-environment precedence.

:func:`resolve_config` merges three layers, highest priority first:

1. Explicit overrides passed to the client constructor.
2. Environment variables (see :data:`ENV_DEFAULTS`).
3. Static defaults (see :data:`STATIC_DEFAULTS`).

``log_level`` is deliberately not read from the environment; it can only
be changed through an explicit override.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from sierra_api_client.exceptions import ConfigError
from sierra_api_client.models import ClientConfig

ENV_DEFAULTS: dict[str, str] = {
    "base_url": "SIERRA_API_BASE_URL",
    "client_id": "SIERRA_OAUTH_ID",
    "client_secret": "SIERRA_OAUTH_SECRET",
    "oauth_url": "SIERRA_OAUTH_URL",
}
"""Required settings and the environment variable each falls back to."""

STATIC_DEFAULTS: dict[str, Any] = {
    "log_level": "info",
}


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect the environment-provided values, skipping unset or empty variables."""
    values: dict[str, Any] = {}
    for key, env_var in ENV_DEFAULTS.items():
        value = environ.get(env_var)
        if value:
            values[key] = value
    return values


def resolve_config(
    overrides: Union[Mapping[str, Any], ClientConfig, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Build the effective :class:`~sierra_api_client.models.ClientConfig`.

    Args:
        overrides: Explicit settings. Keys whose value is ``None`` are
            treated as not given. A ready-made ``ClientConfig`` is
            returned unchanged.
        environ: Environment to read fallbacks from. Defaults to
            ``os.environ``.

    Returns:
        The resolved, frozen configuration.

    Raises:
        ConfigError: If a required setting is missing from both layers, or a
            value fails validation.
    """
    if isinstance(overrides, ClientConfig):
        return overrides
    if environ is None:
        environ = os.environ

    merged: dict[str, Any] = dict(STATIC_DEFAULTS)
    merged.update(_from_env(environ))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    for key, env_var in ENV_DEFAULTS.items():
        if not merged.get(key):
            raise ConfigError(
                f"Missing config: neither config.{key} nor ENV.{env_var} are set",
                field=key,
                env_var=env_var,
            )

    try:
        return ClientConfig(**merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config: {exc}") from exc
