from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from pynetatmo._api.oauth import build_refresh_form, parse_token_response
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import NetatmoAuthError
from pynetatmo.session import AccessToken, TokenManager


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@dataclass
class FakeResponse:
    status: int
    body: str | bytes
    delay: float = 0.0
    error: Exception | None = None

    async def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    async def __aenter__(self) -> FakeResponse:
        # Yield so concurrent callers pile up behind the in-flight refresh.
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeTokenEndpoint:
    replies: list[tuple[int, Any]]
    delay: float = 0.01
    error: Exception | None = None
    posts: list[dict[str, str]] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)

    def post(self, url: str, *, data: dict[str, str], headers: dict[str, str], timeout: Any) -> FakeResponse:
        self.urls.append(url)
        self.posts.append(dict(data))
        status, body = self.replies[min(len(self.posts), len(self.replies)) - 1]
        text = body if isinstance(body, (str, bytes)) else json.dumps(body)
        return FakeResponse(status=status, body=text, delay=self.delay, error=self.error)


def _ok(token: str, expires_in: int = 3600, **extra: Any) -> tuple[int, dict[str, Any]]:
    return 200, {"access_token": token, "expires_in": expires_in, **extra}


@pytest.fixture
def config() -> NetatmoConfig:
    return NetatmoConfig(client_id="cid", client_secret="csecret", refresh_token="rt-1")


def _manager(config: NetatmoConfig, endpoint: FakeTokenEndpoint, clock: FakeClock) -> TokenManager:
    return TokenManager(config, endpoint, clock=clock)  # type: ignore[arg-type]


# ------------------------------------------------------------------
# AccessToken
# ------------------------------------------------------------------


def test_access_token_expiry_window() -> None:
    token = AccessToken(value="tok", expires_at=3600.0)
    assert token.is_expired(3539.0) is False
    assert token.is_expired(3540.0) is True
    assert token.is_expired(100.0, margin=3500.0) is True
    assert token.remaining(600.0) == 3000.0


def test_access_token_value_hidden_from_repr() -> None:
    token = AccessToken(value="secret-token", expires_at=1.0)
    assert "secret-token" not in repr(token)


# ------------------------------------------------------------------
# Token endpoint helpers
# ------------------------------------------------------------------


def test_build_refresh_form(config: NetatmoConfig) -> None:
    assert build_refresh_form(config, "rt-9") == {
        "grant_type": "refresh_token",
        "refresh_token": "rt-9",
        "client_id": "cid",
        "client_secret": "csecret",
    }


def test_parse_token_response_accepts_space_separated_scope() -> None:
    parsed = parse_token_response(200, json.dumps({"access_token": "a", "expires_in": 10, "scope": "read_station"}))
    assert parsed.access_token == "a"
    assert parsed.scope == ["read_station"]


@pytest.mark.parametrize(
    ("status", "text"),
    [
        (400, '{"error": "invalid_grant"}'),
        (200, "<html>nope</html>"),
        (200, '{"expires_in": 10}'),
        (200, '{"access_token": "a"}'),
        (200, '{"access_token": "   ", "expires_in": 10800}'),
    ],
)
def test_parse_token_response_failures_raise_auth_error(status: int, text: str) -> None:
    with pytest.raises(NetatmoAuthError) as exc_info:
        parse_token_response(status, text)
    assert exc_info.value.status_code == status


# ------------------------------------------------------------------
# TokenManager
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1")])
    tokens = _manager(config, endpoint, FakeClock())

    results = await asyncio.gather(*(tokens.get_access_token() for _ in range(8)))

    assert results == ["tok-1"] * 8
    assert len(endpoint.posts) == 1
    assert endpoint.urls == ["https://api.netatmo.com/oauth2/token"]
    assert endpoint.posts[0]["grant_type"] == "refresh_token"
    assert endpoint.posts[0]["refresh_token"] == "rt-1"


@pytest.mark.asyncio
async def test_valid_token_is_reused(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1"), _ok("tok-2")])
    clock = FakeClock()
    tokens = _manager(config, endpoint, clock)

    assert await tokens.get_access_token() == "tok-1"
    # expires_at = 3600 - 60; refresh window opens 60s before that.
    clock.now = 3479.0
    assert await tokens.get_access_token() == "tok-1"
    assert len(endpoint.posts) == 1


@pytest.mark.asyncio
async def test_refreshes_once_inside_margin(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1"), _ok("tok-2")])
    clock = FakeClock()
    tokens = _manager(config, endpoint, clock)

    await tokens.get_access_token()
    clock.now = 3480.0
    results = await asyncio.gather(*(tokens.get_access_token() for _ in range(3)))

    assert results == ["tok-2"] * 3
    assert len(endpoint.posts) == 2
    assert tokens.token is not None
    assert tokens.token.expires_at == 3480.0 + 3600 - 60


@pytest.mark.asyncio
async def test_failed_refresh_raises_for_every_waiter(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[(400, {"error": "invalid_grant"})])
    tokens = _manager(config, endpoint, FakeClock())

    results = await asyncio.gather(*(tokens.get_access_token() for _ in range(4)), return_exceptions=True)

    assert len(endpoint.posts) == 1
    assert all(isinstance(result, NetatmoAuthError) for result in results)
    assert len({id(result) for result in results}) == 1
    assert tokens.token is None


@pytest.mark.asyncio
async def test_next_call_after_failure_retries(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[(500, "boom"), _ok("tok-1")])
    tokens = _manager(config, endpoint, FakeClock())

    with pytest.raises(NetatmoAuthError):
        await tokens.get_access_token()
    assert await tokens.get_access_token() == "tok-1"
    assert len(endpoint.posts) == 2


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_token(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1"), (503, "unavailable")])
    clock = FakeClock()
    tokens = _manager(config, endpoint, clock)

    await tokens.get_access_token()
    clock.now = 4000.0
    with pytest.raises(NetatmoAuthError):
        await tokens.get_access_token()

    assert tokens.token is not None
    assert tokens.token.value == "tok-1"


@pytest.mark.asyncio
async def test_rotated_refresh_token_is_used_next_time(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1", refresh_token="rt-2"), _ok("tok-2")])
    clock = FakeClock()
    tokens = _manager(config, endpoint, clock)

    await tokens.get_access_token()
    clock.now = 3600.0
    await tokens.get_access_token()

    assert [post["refresh_token"] for post in endpoint.posts] == ["rt-1", "rt-2"]


@pytest.mark.asyncio
async def test_invalidate_forces_refresh(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("tok-1"), _ok("tok-2")])
    tokens = _manager(config, endpoint, FakeClock())

    await tokens.get_access_token()
    tokens.invalidate()

    assert await tokens.get_access_token() == "tok-2"


@pytest.mark.asyncio
async def test_network_error_maps_to_auth_error(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[_ok("unused")], error=aiohttp.ClientConnectionError("refused"))
    tokens = _manager(config, endpoint, FakeClock())

    with pytest.raises(NetatmoAuthError, match="refused"):
        await tokens.get_access_token()
    assert tokens.token is None


@pytest.mark.asyncio
async def test_blank_access_token_maps_to_auth_error(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[(200, {"access_token": "   ", "expires_in": 10800})])
    tokens = _manager(config, endpoint, FakeClock())

    with pytest.raises(NetatmoAuthError) as exc_info:
        await tokens.get_access_token()
    assert exc_info.value.status_code == 200
    assert tokens.token is None


@pytest.mark.asyncio
async def test_undecodable_token_body_maps_to_auth_error(config: NetatmoConfig) -> None:
    endpoint = FakeTokenEndpoint(replies=[(200, b'{"access_token": "\xff", "expires_in": 10800}')])
    tokens = _manager(config, endpoint, FakeClock())

    with pytest.raises(NetatmoAuthError, match="undecodable") as exc_info:
        await tokens.get_access_token()
    assert exc_info.value.status_code == 200
    assert "\ufffd" in exc_info.value.body
    assert tokens.token is None
