"""High-level async client for the Netatmo Weather API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import aiohttp

from pynetatmo._api.stations import fetch_all_stations
from pynetatmo._cache import TTLCache
from pynetatmo._transport import AuthenticatedTransport
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import NetatmoError, NetatmoNotFoundError
from pynetatmo.ingestion.query import normalize_query
from pynetatmo.ingestion.timeseries import TimeSeriesAssembler
from pynetatmo.models.station import DeviceInfo, StationsSnapshot
from pynetatmo.models.weather import CurrentWeatherData, HistoricalWeatherData
from pynetatmo.repository import StationRepository
from pynetatmo.session import TokenManager

_logger = logging.getLogger(__name__)


def build_current_weather(snapshot: StationsSnapshot) -> CurrentWeatherData:
    """Current readings of the first station and its first module.

    Raises
    ------
    NetatmoNotFoundError
        If there is no station or the first one reports no dashboard.
    """
    device = snapshot.first_device
    if device is None or device.dashboard_data is None:
        raise NetatmoNotFoundError("No weather station data available")

    indoor = device.dashboard_data
    fields: dict[str, Any] = {
        "station_name": device.station_name,
        "indoor_temperature": indoor.temperature,
        "indoor_humidity": indoor.humidity,
        "pressure": indoor.pressure,
        "co2": indoor.co2,
        "noise": indoor.noise,
        "time_utc": indoor.time_utc,
    }
    module = device.outdoor_module
    if module is not None and module.dashboard_data is not None:
        outdoor = module.dashboard_data
        fields.update(
            outdoor_temperature=outdoor.temperature,
            outdoor_humidity=outdoor.humidity,
            outdoor_max_temperature=outdoor.max_temp,
            outdoor_min_temperature=outdoor.min_temp,
        )
    return CurrentWeatherData(**fields)


class NetatmoClient:
    """Async client for the Netatmo Weather API.

    Usage::

        async with NetatmoClient(NetatmoConfig.from_env()) as client:
            devices = await client.get_available_devices()
            history = await client.get_historical_weather(begin_date="2021-08-01")
    """

    def __init__(
        self,
        config: NetatmoConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock
        self._tokens: TokenManager | None = None
        self._transport: AuthenticatedTransport | None = None
        self._repository: StationRepository | None = None
        self._assembler: TimeSeriesAssembler | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> NetatmoClient:
        self._config.validate()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._tokens = TokenManager(self._config, self._http_session, clock=self._clock)
        self._transport = AuthenticatedTransport(self._config, self._tokens, self._http_session)
        self._repository = StationRepository(
            self._transport,
            device_cache=TTLCache(self._config.cache_ttl, clock=self._clock),
            station_cache=TTLCache(self._config.cache_ttl, clock=self._clock),
        )
        self._assembler = TimeSeriesAssembler(self._transport, self._repository)
        _logger.debug("Netatmo client ready base_url=%s cache_ttl=%s", self._config.base_url, self._config.cache_ttl)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._tokens = None
        self._transport = None
        self._repository = None
        self._assembler = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> AuthenticatedTransport:
        if self._transport is None:
            raise NetatmoError("Client not initialized. Use 'async with NetatmoClient(...) as client:'")
        return self._transport

    def _require_repository(self) -> StationRepository:
        if self._repository is None:
            raise NetatmoError("Client not initialized. Use 'async with NetatmoClient(...) as client:'")
        return self._repository

    def _require_assembler(self) -> TimeSeriesAssembler:
        if self._assembler is None:
            raise NetatmoError("Client not initialized. Use 'async with NetatmoClient(...) as client:'")
        return self._assembler

    @property
    def tokens(self) -> TokenManager | None:
        """Token manager of the open client, for inspection."""
        return self._tokens

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_current_weather(self) -> CurrentWeatherData:
        """Latest readings of the first station (uncached)."""
        snapshot = await fetch_all_stations(self._require_transport())
        return build_current_weather(snapshot)

    async def get_available_devices(self) -> list[DeviceInfo]:
        """Every station on the account (cached)."""
        return await self._require_repository().list_devices()

    async def get_station(self, device_id: str) -> StationsSnapshot:
        """Snapshot filtered to one station (cached)."""
        return await self._require_repository().get_station(device_id)

    async def get_historical_weather(
        self,
        device_id: str | None = None,
        module_id: str | None = None,
        scale: str | None = None,
        sensor_types: str | None = None,
        begin_date: str | None = None,
        end_date: str | None = None,
        limit: int | str | None = None,
    ) -> HistoricalWeatherData:
        """Merged indoor/outdoor history.

        Every parameter is optional: the first station, hourly
        temperature/humidity/pressure and the last seven days are used
        by default. Dates are ``yyyy-MM-dd`` in UTC; *end_date* is
        inclusive.
        """
        query = normalize_query(
            device_id=device_id,
            module_id=module_id,
            scale=scale,
            sensor_types=sensor_types,
            begin_date=begin_date,
            end_date=end_date,
            limit=limit,
        )
        return await self._require_assembler().assemble(query)
