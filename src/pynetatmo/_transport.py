"""Authenticated HTTP transport for the Netatmo data endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pynetatmo._constants import USER_AGENT
from pynetatmo._redact import redact_for_log
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import NetatmoUpstreamError
from pynetatmo.session import TokenManager

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`AuthenticatedTransport`)
    concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> dict[str, Any]:
        ...


class AuthenticatedTransport:
    """GETs JSON from the weather API with a bearer token on every request.

    A 401 is not retried: the token manager refreshes ahead of expiry,
    so a rejected token is reported like any other upstream failure.
    """

    def __init__(
        self,
        config: NetatmoConfig,
        tokens: TokenManager,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._tokens = tokens
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> dict[str, Any]:
        """GET *endpoint* and return the decoded JSON object.

        Raises
        ------
        NetatmoAuthError
            If no access token could be obtained.
        NetatmoUpstreamError
            On transport failure, a non-200 status or a non-JSON body.
        """
        token = await self._tokens.get_access_token()

        headers: dict[str, str] = {
            "accept": "application/json",
            "authorization": f"Bearer {token}",
            "user-agent": USER_AGENT,
        }
        url = f"{self._config.base_url}{endpoint}"
        query = {key: value for key, value in (params or {}).items() if value is not None}

        _logger.debug("GET %s params=%s", url, redact_for_log(query))

        try:
            async with self._http.get(url, params=query, headers=headers, timeout=self._timeout) as resp:
                status = resp.status
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise NetatmoUpstreamError(
                        f"Undecodable body from {endpoint} (HTTP {status})",
                        status_code=status,
                        body=bytes(exc.object).decode("utf-8", errors="replace"),
                        endpoint=endpoint,
                    ) from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise NetatmoUpstreamError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if status != 200:
            raise NetatmoUpstreamError(
                f"HTTP {status} from {endpoint}: {text[:200]}",
                status_code=status,
                body=text,
                endpoint=endpoint,
            )

        try:
            body_json = json.loads(text)
        except json.JSONDecodeError as exc:
            raise NetatmoUpstreamError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                body=text,
                endpoint=endpoint,
            ) from exc

        if not isinstance(body_json, dict):
            raise NetatmoUpstreamError(
                f"Unexpected payload type from {endpoint}: {type(body_json).__name__}",
                status_code=status,
                body=text,
                endpoint=endpoint,
            )

        _logger.debug("%s reply parsed=%s", endpoint, redact_for_log(body_json, max_items=5))
        return body_json
