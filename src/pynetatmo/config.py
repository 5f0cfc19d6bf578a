"""Client configuration for pynetatmo."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pynetatmo._constants import BASE_URL, CACHE_TTL, TOKEN_REFRESH_MARGIN
from pynetatmo.exceptions import NetatmoConfigError


@dataclasses.dataclass(frozen=True)
class NetatmoConfig:
    """Client configuration.

    Parameters
    ----------
    client_id : str
        OAuth2 client id of the Netatmo developer app.
    client_secret : str
        OAuth2 client secret of the Netatmo developer app.
    refresh_token : str
        Long-lived refresh token exchanged for short-lived access tokens.
    base_url : str
        API base URL, used for both ``/oauth2/token`` and ``/api/*``.
    cache_ttl : float
        Seconds a cached device list or station snapshot stays valid.
    token_refresh_margin : float
        Safety margin in seconds; a token is refreshed this long before
        the upstream expiry.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    """

    client_id: str
    client_secret: str
    refresh_token: str
    base_url: str = BASE_URL
    cache_ttl: float = CACHE_TTL
    token_refresh_margin: float = TOKEN_REFRESH_MARGIN
    request_timeout: float = 30.0

    def validate(self) -> None:
        """Raise :class:`NetatmoConfigError` when a credential is missing."""
        missing = [
            name
            for name in ("client_id", "client_secret", "refresh_token")
            if not str(getattr(self, name) or "").strip()
        ]
        if missing:
            raise NetatmoConfigError(f"Missing Netatmo credentials: {', '.join(missing)}")
        if self.cache_ttl <= 0:
            raise NetatmoConfigError(f"cache_ttl must be positive, got {self.cache_ttl}")

    @classmethod
    def from_env(cls, **overrides: Any) -> NetatmoConfig:
        """Create configuration from environment variables.

        Reads ``NETATMO_CLIENT_ID``, ``NETATMO_CLIENT_SECRET``,
        ``NETATMO_REFRESH_TOKEN`` and the optional ``NETATMO_BASE_URL``,
        ``NETATMO_CACHE_TTL`` and ``NETATMO_REQUEST_TIMEOUT``. Explicit
        keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "NETATMO_CLIENT_ID": "client_id",
            "NETATMO_CLIENT_SECRET": "client_secret",
            "NETATMO_REFRESH_TOKEN": "refresh_token",
            "NETATMO_BASE_URL": "base_url",
        }
        config_kwargs: dict[str, Any] = {"client_id": "", "client_secret": "", "refresh_token": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        # numeric settings, handled separately
        ttl_env = env.get("NETATMO_CACHE_TTL")
        if ttl_env is not None and "cache_ttl" not in overrides:
            config_kwargs["cache_ttl"] = float(ttl_env)

        timeout_env = env.get("NETATMO_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
