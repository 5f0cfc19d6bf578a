"""pynetatmo - Async Python client for the Netatmo Weather station API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pynetatmo")
except PackageNotFoundError:
    __version__ = "0+local"
from pynetatmo.client import NetatmoClient
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import (
    ErrorCategory,
    NetatmoAuthError,
    NetatmoConfigError,
    NetatmoError,
    NetatmoInvalidParametersError,
    NetatmoNotFoundError,
    NetatmoUpstreamError,
)
from pynetatmo.models import (
    ApiResult,
    CurrentWeatherData,
    DashboardData,
    DeviceInfo,
    HistoricalView,
    HistoricalWeatherData,
    MeasurementSeries,
    MergedRecord,
    StationDevice,
    StationModule,
    StationsSnapshot,
)
from pynetatmo.session import AccessToken, TokenManager

__all__ = [
    "__version__",
    "AccessToken",
    "ApiResult",
    "CurrentWeatherData",
    "DashboardData",
    "DeviceInfo",
    "ErrorCategory",
    "HistoricalView",
    "HistoricalWeatherData",
    "MeasurementSeries",
    "MergedRecord",
    "NetatmoAuthError",
    "NetatmoClient",
    "NetatmoConfig",
    "NetatmoConfigError",
    "NetatmoError",
    "NetatmoInvalidParametersError",
    "NetatmoNotFoundError",
    "NetatmoUpstreamError",
    "StationDevice",
    "StationModule",
    "StationsSnapshot",
    "TokenManager",
]
