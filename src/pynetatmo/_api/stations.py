"""Station endpoint: /api/getstationsdata.

Returns the station → module → dashboard tree, either for every station
on the account or filtered to one ``device_id``.
"""

from __future__ import annotations

import logging

from pynetatmo._constants import STATIONS_ENDPOINT
from pynetatmo._transport import Transport
from pynetatmo.models.station import StationsSnapshot

_logger = logging.getLogger(__name__)


async def fetch_all_stations(transport: Transport) -> StationsSnapshot:
    """Fetch every station on the account."""
    _logger.debug("Fetching all weather station data")
    payload = await transport.get_json(STATIONS_ENDPOINT)
    return StationsSnapshot.model_validate(payload)


async def fetch_station(transport: Transport, device_id: str) -> StationsSnapshot:
    """Fetch the snapshot filtered to *device_id*."""
    _logger.debug("Fetching weather station data for device_id=%s", device_id)
    payload = await transport.get_json(STATIONS_ENDPOINT, {"device_id": device_id})
    return StationsSnapshot.model_validate(payload)
