"""Cache-through access to the device list and per-station snapshots."""

from __future__ import annotations

import logging

from pynetatmo._api.stations import fetch_all_stations, fetch_station
from pynetatmo._cache import TTLCache
from pynetatmo._transport import Transport
from pynetatmo.exceptions import NetatmoNotFoundError
from pynetatmo.models.station import DeviceInfo, StationsSnapshot

_logger = logging.getLogger(__name__)

DEVICE_LIST_KEY = "devices"
STATION_KEY_PREFIX = "station:"


class StationRepository:
    """Wraps the station endpoint with short-lived caches.

    Two callers that miss the cache at the same time may both go
    upstream; the later ``put`` wins.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        device_cache: TTLCache[str, list[DeviceInfo]] | None = None,
        station_cache: TTLCache[str, StationsSnapshot] | None = None,
    ) -> None:
        self._transport = transport
        self._devices = device_cache if device_cache is not None else TTLCache()
        self._stations = station_cache if station_cache is not None else TTLCache()

    async def list_devices(self) -> list[DeviceInfo]:
        """Return every station on the account, in upstream order.

        Raises
        ------
        NetatmoNotFoundError
            If the account has no station. Empty results are not cached.
        """
        cached = self._devices.get(DEVICE_LIST_KEY)
        if cached is not None:
            return list(cached)

        snapshot = await fetch_all_stations(self._transport)
        devices = [device.to_device_info() for device in snapshot.devices]
        if not devices:
            raise NetatmoNotFoundError("No weather stations found")

        self._devices.put(DEVICE_LIST_KEY, devices)
        _logger.debug("Cached %d devices", len(devices))
        return list(devices)

    async def get_station(self, device_id: str) -> StationsSnapshot:
        """Return the snapshot filtered to *device_id*."""
        key = f"{STATION_KEY_PREFIX}{device_id}"
        cached = self._stations.get(key)
        if cached is not None:
            return cached

        snapshot = await fetch_station(self._transport, device_id)
        self._stations.put(key, snapshot)
        return snapshot
