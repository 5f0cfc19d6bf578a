"""OAuth2 access-token lifecycle for authenticated API calls."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from pynetatmo._api.oauth import build_refresh_form, parse_token_response
from pynetatmo._constants import TOKEN_ENDPOINT, TOKEN_REFRESH_MARGIN
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import NetatmoAuthError

_logger = logging.getLogger(__name__)


class AccessToken(BaseModel):
    """Bearer token obtained from the refresh-token grant.

    Parameters
    ----------
    value : str
        The bearer token sent in ``Authorization`` headers.
    expires_at : float
        Clock reading (``time.monotonic()`` by default) after which the
        token must not be used. Already reduced by the safety margin, and
        refreshed a further *margin* seconds ahead of it.
    refresh_token : str or None
        Refresh token that came with this access token, if rotated.
    scope : list[str]
        Granted scopes.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    value: str = Field(min_length=1, repr=False)
    expires_at: float
    refresh_token: str | None = Field(default=None, repr=False)
    scope: list[str] = Field(default_factory=list)

    def is_expired(self, now: float, margin: float = TOKEN_REFRESH_MARGIN) -> bool:
        """Whether the token is inside the refresh window at *now*."""
        return now >= self.expires_at - margin

    def remaining(self, now: float) -> float:
        """Seconds until ``expires_at``."""
        return self.expires_at - now


class TokenManager:
    """Keeps one access token valid for any number of concurrent callers.

    Callers that find no token, or a token inside the refresh window,
    share a single in-flight refresh and all observe its outcome: the
    same new token, or the same :class:`NetatmoAuthError`. A failed
    refresh leaves the previously held token untouched.
    """

    def __init__(
        self,
        config: NetatmoConfig,
        http_session: aiohttp.ClientSession,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._http = http_session
        self._clock = clock
        self._margin = config.token_refresh_margin
        self._refresh_token = config.refresh_token
        self._token: AccessToken | None = None
        # Sole guard for refreshes: at most one unfinished refresh task exists.
        self._inflight: asyncio.Future[AccessToken] | None = None

    @property
    def token(self) -> AccessToken | None:
        """The held token, possibly stale."""
        return self._token

    async def get_access_token(self) -> str:
        """Return a valid bearer token, refreshing it when needed."""
        token = self._token
        if token is not None and not token.is_expired(self._clock(), self._margin):
            return token.value

        if token is None:
            _logger.debug("No access token held, refreshing")
        else:
            _logger.debug("Access token inside refresh window, refreshing")

        flight = self._inflight
        if flight is None or flight.done():
            flight = asyncio.ensure_future(self._refresh())
            self._inflight = flight
            flight.add_done_callback(self._clear_inflight)

        # A cancelled caller must not cancel the refresh other callers wait on.
        fresh = await asyncio.shield(flight)
        return fresh.value

    def invalidate(self) -> None:
        """Drop the held token (next call will refresh)."""
        self._token = None

    def _clear_inflight(self, flight: asyncio.Future[AccessToken]) -> None:
        if self._inflight is flight:
            self._inflight = None
        if not flight.cancelled():
            # Mark the outcome as retrieved even if every waiter went away.
            flight.exception()

    async def _refresh(self) -> AccessToken:
        url = f"{self._config.base_url}{TOKEN_ENDPOINT}"
        form = build_refresh_form(self._config, self._refresh_token)
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)

        _logger.info("Refreshing Netatmo access token")
        try:
            async with self._http.post(
                url,
                data=form,
                headers={"accept": "application/json"},
                timeout=timeout,
            ) as resp:
                status = resp.status
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    _logger.error("Token endpoint returned an undecodable body, HTTP status %s", status)
                    raise NetatmoAuthError(
                        f"Token endpoint returned an undecodable body (HTTP {status})",
                        status_code=status,
                        body=bytes(exc.object).decode("utf-8", errors="replace"),
                    ) from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            _logger.error("Token refresh request failed: %s", exc)
            raise NetatmoAuthError(f"Token refresh request failed: {exc}") from exc

        try:
            response = parse_token_response(status, text)
        except NetatmoAuthError:
            _logger.error("Failed to refresh access token, HTTP status %s", status)
            raise

        token = AccessToken(
            value=response.access_token,
            expires_at=self._clock() + response.expires_in - self._margin,
            refresh_token=response.refresh_token,
            scope=response.scope,
        )
        if response.refresh_token:
            self._refresh_token = response.refresh_token
        self._token = token

        _logger.info("Refreshed Netatmo access token, expires in %d seconds", response.expires_in)
        return token
