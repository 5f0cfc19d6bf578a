"""Historical measurement endpoint: /api/getmeasure."""

from __future__ import annotations

import logging

from pynetatmo._constants import MEASURE_ENDPOINT
from pynetatmo._transport import Transport
from pynetatmo.models.measure import MeasurementSeries, parse_measurement_series
from pynetatmo.models.requests import MeasureRequest

_logger = logging.getLogger(__name__)


async def fetch_historical(transport: Transport, request: MeasureRequest) -> MeasurementSeries | None:
    """Fetch one measurement run for a station (or one of its modules).

    Parameters
    ----------
    transport : Transport
        Authenticated transport.
    request : MeasureRequest
        Query parameters; ``module_id=None`` selects the station itself.

    Returns
    -------
    MeasurementSeries or None
        ``None`` when a 200 reply lacks ``beg_time``, ``step_time`` or
        ``value``.

    Raises
    ------
    NetatmoUpstreamError
        On transport failure or a non-200 reply.
    """
    payload = await transport.get_json(MEASURE_ENDPOINT, request.to_params())
    series = parse_measurement_series(payload)
    if series is None:
        _logger.debug(
            "No measurement run in reply device_id=%s module_id=%s status=%s",
            request.device_id,
            request.module_id,
            payload.get("status"),
        )
    return series
