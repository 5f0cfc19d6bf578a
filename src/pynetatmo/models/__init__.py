"""Data models for Netatmo API responses and library results."""

from pynetatmo.models._base import NetatmoBaseModel, NetatmoResultModel, parse_netatmo_timestamp
from pynetatmo.models.measure import MeasurementSeries, parse_measurement_series
from pynetatmo.models.requests import HistoricalQuery, MeasureRequest
from pynetatmo.models.result import ApiResult
from pynetatmo.models.station import DashboardData, DeviceInfo, StationDevice, StationModule, StationsSnapshot
from pynetatmo.models.token import TokenResponse
from pynetatmo.models.weather import (
    CurrentWeatherData,
    HistoricalView,
    HistoricalWeatherData,
    MergedRecord,
    OutdoorModuleData,
)

__all__ = [
    "ApiResult",
    "CurrentWeatherData",
    "DashboardData",
    "DeviceInfo",
    "HistoricalQuery",
    "HistoricalView",
    "HistoricalWeatherData",
    "MeasureRequest",
    "MeasurementSeries",
    "MergedRecord",
    "NetatmoBaseModel",
    "NetatmoResultModel",
    "OutdoorModuleData",
    "StationDevice",
    "StationModule",
    "StationsSnapshot",
    "TokenResponse",
    "parse_measurement_series",
    "parse_netatmo_timestamp",
]
