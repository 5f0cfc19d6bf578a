from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from pynetatmo.client import NetatmoClient
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import (
    ErrorCategory,
    NetatmoAuthError,
    NetatmoConfigError,
    NetatmoError,
    NetatmoNotFoundError,
    NetatmoUpstreamError,
)
from pynetatmo.models import ApiResult

BASE_URL = "https://api.test"
DEVICE_ID = "70:ee:50:00:00:01"
MODULE_ID = "02:00:00:00:00:01"
# 2021-08-04 16:00 UTC
T0 = 1628092800


@dataclass
class FakeResponse:
    status: int
    body: str | bytes

    async def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    async def __aenter__(self) -> FakeResponse:
        await asyncio.sleep(0)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeNetatmoBackend:
    """Stands in for ``aiohttp.ClientSession`` and answers like the Netatmo cloud."""

    token_status: int = 200
    devices: list[dict[str, Any]] | None = None
    indoor_body: list[dict[str, Any]] | None = None
    module_measure_status: int = 200
    stations_raw: bytes | None = None
    calls: dict[str, int] = field(default_factory=dict)
    requests: list[tuple[str, dict[str, str]]] = field(default_factory=list)
    auth_headers: list[str] = field(default_factory=list)
    closed: bool = False

    def _record_call(self, endpoint: str) -> None:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1

    def _json(self, payload: Any, status: int = 200) -> FakeResponse:
        return FakeResponse(status=status, body=json.dumps(payload))

    def _devices(self) -> list[dict[str, Any]]:
        if self.devices is not None:
            return self.devices
        return [
            {
                "_id": DEVICE_ID,
                "station_name": "Home",
                "type": "NAMain",
                "data_type": ["Temperature", "CO2", "Humidity", "Noise", "Pressure"],
                "dashboard_data": {
                    "time_utc": T0,
                    "Temperature": 22.5,
                    "Humidity": 45,
                    "Pressure": 1013.2,
                    "CO2": 600,
                    "Noise": 40,
                },
                "modules": [
                    {
                        "_id": MODULE_ID,
                        "type": "NAModule1",
                        "module_name": "Garden",
                        "dashboard_data": {"time_utc": T0, "Temperature": 20.5, "Humidity": 55, "min_temp": 14.1},
                    }
                ],
            }
        ]

    def post(self, url: str, *, data: dict[str, str], headers: dict[str, str], timeout: Any) -> FakeResponse:
        endpoint = url.removeprefix(BASE_URL)
        self._record_call(endpoint)
        if self.token_status != 200:
            return self._json({"error": "invalid_grant"}, status=self.token_status)
        return self._json({"access_token": "access-1", "expires_in": 10800, "refresh_token": data["refresh_token"]})

    def get(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        timeout: Any = None,
    ) -> FakeResponse:
        endpoint = url.removeprefix(BASE_URL)
        query = dict(params or {})
        self._record_call(endpoint)
        self.requests.append((endpoint, query))
        self.auth_headers.append((headers or {}).get("authorization", ""))

        if endpoint == "/api/getstationsdata":
            if self.stations_raw is not None:
                return FakeResponse(status=200, body=self.stations_raw)
            devices = self._devices()
            if "device_id" in query:
                devices = [device for device in devices if device["_id"] == query["device_id"]]
            return self._json({"status": "ok", "time_server": T0 + 100, "body": {"devices": devices}})

        if endpoint == "/api/getmeasure":
            if "module_id" in query:
                if self.module_measure_status != 200:
                    return FakeResponse(status=self.module_measure_status, body="internal error")
                body = [{"beg_time": T0, "step_time": 3600, "value": [[20.5, 55], [20.1, 57]]}]
            elif self.indoor_body is not None:
                body = self.indoor_body
            else:
                body = [{"beg_time": T0, "step_time": 3600, "value": [[22.5, 45, 1013.2], [22.7, 46, 1013.0]]}]
            return self._json({"status": "ok", "body": body, "time_exec": 0.02})

        return FakeResponse(status=404, body="not found")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> NetatmoConfig:
    return NetatmoConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-1",
        base_url=BASE_URL,
    )


@pytest.fixture
def backend() -> FakeNetatmoBackend:
    return FakeNetatmoBackend()


def _client(config: NetatmoConfig, backend: FakeNetatmoBackend) -> NetatmoClient:
    return NetatmoClient(config, session=backend)  # type: ignore[arg-type]


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_client_happy_path_exercises_full_library(
    config: NetatmoConfig, backend: FakeNetatmoBackend
) -> None:
    async with _client(config, backend) as client:
        devices = await client.get_available_devices()
        assert [device.device_id for device in devices] == [DEVICE_ID]

        current = await client.get_current_weather()
        assert current.station_name == "Home"
        assert current.indoor_temperature == 22.5
        assert current.co2 == 600
        assert current.outdoor_temperature == 20.5
        assert current.outdoor_min_temperature == 14.1

        history = await client.get_historical_weather(begin_date="2021-08-04", end_date="2021-08-04")
        assert history.device_id == DEVICE_ID
        assert history.begin_timestamp == 1628035200
        assert history.end_timestamp == 1628121599
        assert history.total_data_points == 2
        assert history.values[0].to_dict() == {
            "timestamp": "2021-08-04 16:00",
            "indoorTemperature": 22.5,
            "indoorHumidity": 45,
            "indoorPressure": 1013.2,
            "outdoorTemperature": 20.5,
            "outdoorHumidity": 55,
        }
        assert history.outdoor_module_name == "Garden"

        station = await client.get_station(DEVICE_ID)
        assert station.first_device is not None
        assert station.first_device.id == DEVICE_ID

        assert client.tokens is not None
        assert client.tokens.token is not None

    # One token grant for the whole session.
    assert backend.calls["/oauth2/token"] == 1
    # Device list (cached afterwards), current weather (uncached), filtered station (cached afterwards).
    assert backend.calls["/api/getstationsdata"] == 3
    assert backend.calls["/api/getmeasure"] == 2
    assert set(backend.auth_headers) == {"Bearer access-1"}

    measure_params = [params for endpoint, params in backend.requests if endpoint == "/api/getmeasure"]
    assert measure_params[0] == {
        "device_id": DEVICE_ID,
        "scale": "1hour",
        "type": "Temperature,Humidity,Pressure",
        "date_begin": "1628035200",
        "date_end": "1628121599",
        "limit": "1024",
        "optimize": "true",
        "real_time": "true",
    }
    assert measure_params[1] == {**measure_params[0], "module_id": MODULE_ID}
    assert backend.closed is False


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_outdoor_failure_degrades_to_indoor_only(config: NetatmoConfig, backend: FakeNetatmoBackend) -> None:
    backend.module_measure_status = 500

    async with _client(config, backend) as client:
        history = await client.get_historical_weather(device_id=DEVICE_ID)

    assert history.total_data_points == 2
    assert all(not record.has_outdoor for record in history.values)
    assert history.outdoor_module_id == MODULE_ID
    assert history.outdoor_temperature == 20.5


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_token_error_raises_authentication(config: NetatmoConfig, backend: FakeNetatmoBackend) -> None:
    backend.token_status = 400

    async with _client(config, backend) as client:
        with pytest.raises(NetatmoAuthError):
            await client.get_available_devices()

        result = await ApiResult.capture(client.get_current_weather())

    assert result.success is False
    assert result.category is ErrorCategory.AUTHENTICATION_ERROR
    assert result.status_code == 401
    assert "/api/getstationsdata" not in backend.calls


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_no_stations_raises_not_found(config: NetatmoConfig, backend: FakeNetatmoBackend) -> None:
    backend.devices = []

    async with _client(config, backend) as client:
        with pytest.raises(NetatmoNotFoundError, match="Please provide a valid device_id"):
            await client.get_historical_weather()
        with pytest.raises(NetatmoNotFoundError, match="No weather station data available"):
            await client.get_current_weather()
        result = await ApiResult.capture(client.get_available_devices())

    assert result.status_code == 404


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_unparseable_indoor_series_is_an_api_error(
    config: NetatmoConfig, backend: FakeNetatmoBackend
) -> None:
    backend.indoor_body = [{"beg_time": T0, "value": [[21.0]]}]

    async with _client(config, backend) as client:
        result = await ApiResult.capture(client.get_historical_weather(device_id=DEVICE_ID))

    assert result.success is False
    assert result.category is ErrorCategory.API_ERROR
    assert result.status_code == 502
    assert result.message == "Could not parse measurement data from Netatmo response"
    # The outdoor module is not queried once the indoor series is unusable.
    assert backend.calls["/api/getmeasure"] == 1


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_upstream_http_error(config: NetatmoConfig, backend: FakeNetatmoBackend) -> None:
    config = NetatmoConfig(
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-1",
        base_url=f"{BASE_URL}/broken",
    )

    async with _client(config, backend) as client:
        with pytest.raises(NetatmoUpstreamError) as exc_info:
            await client.get_available_devices()

    assert exc_info.value.status_code == 404
    assert exc_info.value.endpoint == "/api/getstationsdata"


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_e2e_undecodable_body_is_an_api_error(config: NetatmoConfig, backend: FakeNetatmoBackend) -> None:
    backend.stations_raw = b'{"body": "\xff"}'

    async with _client(config, backend) as client:
        with pytest.raises(NetatmoUpstreamError) as exc_info:
            await client.get_available_devices()
        result = await ApiResult.capture(client.get_current_weather())

    assert exc_info.value.status_code == 200
    assert exc_info.value.endpoint == "/api/getstationsdata"
    assert "\ufffd" in exc_info.value.body
    assert result.category is ErrorCategory.API_ERROR
    assert result.status_code == 502


@pytest.mark.asyncio
async def test_client_requires_context_manager(config: NetatmoConfig) -> None:
    client = NetatmoClient(config)
    with pytest.raises(NetatmoError, match="not initialized"):
        await client.get_available_devices()


@pytest.mark.asyncio
async def test_missing_credentials_fail_on_enter(backend: FakeNetatmoBackend) -> None:
    config = NetatmoConfig(client_id="id", client_secret="", refresh_token="")

    with pytest.raises(NetatmoConfigError, match="client_secret, refresh_token"):
        async with _client(config, backend):
            pass
    assert backend.calls == {}


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NETATMO_CLIENT_ID", "env-id")
    monkeypatch.setenv("NETATMO_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("NETATMO_REFRESH_TOKEN", "env-refresh")
    monkeypatch.setenv("NETATMO_CACHE_TTL", "30")

    config = NetatmoConfig.from_env(base_url=BASE_URL)

    assert config.client_id == "env-id"
    assert config.refresh_token == "env-refresh"
    assert config.cache_ttl == 30.0
    assert config.base_url == BASE_URL
    config.validate()
