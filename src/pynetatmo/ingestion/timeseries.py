"""Indoor/outdoor history retrieval and merge.

The station's own series drives the result: one record per indoor
sample. The first attached module (the outdoor sensor) is fetched with
the same parameters and folded into those records where it has a
sample; any failure on the outdoor side only drops the outdoor fields.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from pynetatmo._api.measure import fetch_historical
from pynetatmo._constants import MEASURE_ENDPOINT
from pynetatmo._transport import Transport
from pynetatmo.exceptions import NetatmoAuthError, NetatmoError, NetatmoNotFoundError, NetatmoUpstreamError
from pynetatmo.ingestion.query import format_timestamp
from pynetatmo.models.measure import MeasurementSeries, Point
from pynetatmo.models.requests import HistoricalQuery, MeasureRequest
from pynetatmo.models.weather import HistoricalWeatherData, MergedRecord, OutdoorModuleData
from pynetatmo.repository import StationRepository

_logger = logging.getLogger(__name__)

# Positional layout of one sample for the default sensor list.
_INDOOR_FIELDS = ("indoor_temperature", "indoor_humidity", "indoor_pressure")
# Outdoor points carry their own timestamp first.
_OUTDOOR_FIELDS = ("outdoor_temperature", "outdoor_humidity")


def merge_series(
    indoor: MeasurementSeries,
    outdoor_points: Sequence[Point] | None = None,
    *,
    align_by_timestamp: bool = False,
) -> list[MergedRecord]:
    """Join indoor samples with ``(timestamp, temperature, humidity)`` points.

    By default the join is positional: record ``i`` takes outdoor point
    ``i`` when there is one. With *align_by_timestamp* the outdoor points
    are keyed by their leading timestamp instead, and a record only gets
    outdoor fields from a point measured at the same instant.
    Missing or ``None`` tuple elements leave the field absent.
    """
    by_timestamp: dict[int, Point] | None = None
    if outdoor_points is not None and align_by_timestamp:
        by_timestamp = {int(point[0]): point for point in outdoor_points if point and point[0] is not None}

    records: list[MergedRecord] = []
    for index, value in enumerate(indoor.values):
        timestamp = indoor.timestamp_at(index)
        fields: dict[str, Any] = {"timestamp": format_timestamp(timestamp)}
        for name, reading in zip(_INDOOR_FIELDS, value, strict=False):
            if reading is not None:
                fields[name] = reading

        point: Point | None = None
        if by_timestamp is not None:
            point = by_timestamp.get(timestamp)
        elif outdoor_points is not None and index < len(outdoor_points):
            point = outdoor_points[index]
        if point is not None:
            for name, reading in zip(_OUTDOOR_FIELDS, point[1:], strict=False):
                if reading is not None:
                    fields[name] = reading

        records.append(MergedRecord(**fields))
    return records


class TimeSeriesAssembler:
    """Builds a :class:`HistoricalWeatherData` for one resolved query."""

    def __init__(self, transport: Transport, repository: StationRepository) -> None:
        self._transport = transport
        self._repository = repository

    async def assemble(self, query: HistoricalQuery) -> HistoricalWeatherData:
        """Fetch, merge and describe the history selected by *query*.

        Raises
        ------
        NetatmoNotFoundError
            If no device id was given and the account has no station.
        NetatmoUpstreamError
            If the indoor series cannot be fetched or parsed.
        NetatmoAuthError
            If no access token could be obtained.
        """
        device_id = query.device_id or await self._resolve_device_id()

        _logger.info(
            "Requesting historical data with parameters: device_id=%s, scale=%s, type=%s, "
            "date_begin=%s, date_end=%s, limit=%s",
            device_id,
            query.scale,
            query.sensor_types,
            query.date_begin,
            query.date_end,
            query.limit,
        )

        indoor = await fetch_historical(
            self._transport,
            MeasureRequest.from_query(query, device_id=device_id, module_id=query.module_id),
        )
        if indoor is None:
            raise NetatmoUpstreamError(
                "Could not parse measurement data from Netatmo response",
                endpoint=MEASURE_ENDPOINT,
            )

        outdoor = await self._fetch_outdoor(query, device_id)

        align_by_timestamp = False
        if outdoor.points is not None and (
            outdoor.begin_time != indoor.begin_time or outdoor.step_time != indoor.step_time
        ):
            _logger.warning(
                "Outdoor series (begin=%s, step=%s) does not line up with indoor series (begin=%s, step=%s); "
                "joining on timestamps",
                outdoor.begin_time,
                outdoor.step_time,
                indoor.begin_time,
                indoor.step_time,
            )
            align_by_timestamp = True

        records = merge_series(indoor, outdoor.points, align_by_timestamp=align_by_timestamp)

        return HistoricalWeatherData(
            device_id=device_id,
            scale=query.scale,
            sensor_types=query.sensor_type_list,
            status=indoor.status,
            begin_timestamp=query.date_begin,
            end_timestamp=query.date_end,
            begin_time=format_timestamp(query.date_begin),
            end_time=format_timestamp(query.date_end),
            step_time=indoor.step_time,
            values=records,
            total_data_points=len(records),
            outdoor_module_id=outdoor.module_id,
            outdoor_module_name=outdoor.module_name,
            outdoor_temperature=outdoor.current_temperature,
            outdoor_humidity=outdoor.current_humidity,
        )

    async def _resolve_device_id(self) -> str:
        try:
            devices = await self._repository.list_devices()
        except NetatmoNotFoundError as exc:
            raise NetatmoNotFoundError("No weather stations found. Please provide a valid device_id.") from exc
        device_id = devices[0].device_id
        _logger.info("Using device_id: %s", device_id)
        return device_id

    async def _fetch_outdoor(self, query: HistoricalQuery, device_id: str) -> OutdoorModuleData:
        """Best-effort outdoor context; whatever was gathered before a failure is kept."""
        gathered: dict[str, Any] = {}
        try:
            snapshot = await self._repository.get_station(device_id)
            device = snapshot.find_device(device_id) or snapshot.first_device
            module = device.outdoor_module if device is not None else None
            if module is None:
                _logger.debug("Device %s has no module; omitting outdoor data", device_id)
                return OutdoorModuleData()

            gathered["module_id"] = module.id
            gathered["module_name"] = module.module_name
            if module.dashboard_data is not None:
                gathered["current_temperature"] = module.dashboard_data.temperature
                gathered["current_humidity"] = module.dashboard_data.humidity

            series = await fetch_historical(
                self._transport,
                MeasureRequest.from_query(query, device_id=device_id, module_id=module.id),
            )
            if series is not None:
                gathered["begin_time"] = series.begin_time
                gathered["step_time"] = series.step_time
                gathered["points"] = series.points()
            else:
                _logger.warning("Could not parse outdoor measurement data for module %s", module.id)
        except NetatmoAuthError:
            raise
        except (NetatmoError, aiohttp.ClientError, ValueError) as exc:
            _logger.warning("Error fetching outdoor module data: %s", exc)

        return OutdoorModuleData(**gathered)
