"""Station models for the ``/api/getstationsdata`` response."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pynetatmo.ingestion.normalize import safe_float, safe_int
from pynetatmo.models._base import NetatmoBaseModel, NetatmoResultModel, parse_netatmo_timestamp


class DashboardData(NetatmoBaseModel):
    """Last readings reported by a station or module.

    Every field is optional: outdoor modules carry no pressure, CO2 or
    noise, and an unreachable device may report no dashboard at all.
    """

    time_utc: int | None = Field(default=None, validation_alias=AliasChoices("time_utc", "timeUtc"))
    """Epoch seconds of the measurement."""
    temperature: float | None = Field(default=None, validation_alias=AliasChoices("Temperature", "temperature"))
    """Temperature in °C."""
    humidity: int | None = Field(default=None, validation_alias=AliasChoices("Humidity", "humidity"))
    """Relative humidity in %."""
    pressure: float | None = Field(default=None, validation_alias=AliasChoices("Pressure", "pressure"))
    """Sea-level pressure in mbar."""
    absolute_pressure: float | None = Field(
        default=None,
        validation_alias=AliasChoices("AbsolutePressure", "absolute_pressure"),
    )
    """Station-level pressure in mbar."""
    co2: int | None = Field(default=None, validation_alias=AliasChoices("CO2", "co2"))
    """CO2 in ppm."""
    noise: int | None = Field(default=None, validation_alias=AliasChoices("Noise", "noise"))
    """Noise in dB."""
    min_temp: float | None = Field(default=None, validation_alias=AliasChoices("min_temp", "minTemp"))
    max_temp: float | None = Field(default=None, validation_alias=AliasChoices("max_temp", "maxTemp"))
    date_min_temp: int | None = Field(default=None, validation_alias=AliasChoices("date_min_temp"))
    date_max_temp: int | None = Field(default=None, validation_alias=AliasChoices("date_max_temp"))
    temp_trend: str | None = Field(default=None, validation_alias=AliasChoices("temp_trend"))
    pressure_trend: str | None = Field(default=None, validation_alias=AliasChoices("pressure_trend"))

    @property
    def measured_at(self) -> datetime | None:
        """``time_utc`` as a UTC datetime."""
        return parse_netatmo_timestamp(self.time_utc)

    @field_validator("temperature", "pressure", "absolute_pressure", "min_temp", "max_temp", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("time_utc", "humidity", "co2", "noise", "date_min_temp", "date_max_temp", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)


class StationModule(NetatmoBaseModel):
    """An auxiliary module (commonly outdoor) paired with a station."""

    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"))
    """Module MAC address."""
    type: str = Field(default="", validation_alias=AliasChoices("type"))
    """Module type (``NAModule1`` = outdoor)."""
    module_name: str = Field(default="", validation_alias=AliasChoices("module_name", "moduleName"))
    data_type: list[str] = Field(default_factory=list, validation_alias=AliasChoices("data_type", "dataType"))
    battery_percent: int | None = Field(default=None, validation_alias=AliasChoices("battery_percent"))
    reachable: bool | None = Field(default=None, validation_alias=AliasChoices("reachable"))
    dashboard_data: DashboardData | None = Field(
        default=None,
        validation_alias=AliasChoices("dashboard_data", "dashboardData"),
    )

    @field_validator("battery_percent", mode="before")
    @classmethod
    def _coerce_ints(cls, value: Any) -> int | None:
        return safe_int(value)


class StationDevice(NetatmoBaseModel):
    """A base station with its last readings and attached modules."""

    id: str = Field(default="", validation_alias=AliasChoices("_id", "id"))
    """Station MAC address, used as ``device_id`` in every other call."""
    station_name: str = Field(default="", validation_alias=AliasChoices("station_name", "stationName"))
    module_name: str = Field(default="", validation_alias=AliasChoices("module_name", "moduleName"))
    type: str = Field(default="", validation_alias=AliasChoices("type"))
    """Station type (``NAMain``)."""
    data_type: list[str] = Field(default_factory=list, validation_alias=AliasChoices("data_type", "dataType"))
    reachable: bool | None = Field(default=None, validation_alias=AliasChoices("reachable"))
    place: dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("place"))
    dashboard_data: DashboardData | None = Field(
        default=None,
        validation_alias=AliasChoices("dashboard_data", "dashboardData"),
    )
    modules: list[StationModule] = Field(default_factory=list, validation_alias=AliasChoices("modules"))

    @property
    def outdoor_module(self) -> StationModule | None:
        """The first attached module, treated as the outdoor sensor."""
        return self.modules[0] if self.modules else None

    def to_device_info(self) -> DeviceInfo:
        return DeviceInfo(
            device_id=self.id,
            station_name=self.station_name,
            type=self.type,
            data_types=list(self.data_type),
        )


class StationsSnapshot(NetatmoBaseModel):
    """Flattened ``getstationsdata`` response.

    The upstream nests devices under ``body.devices``; a missing body or
    device list parses to an empty ``devices``.
    """

    status: str = ""
    time_server: int | None = None
    devices: list[StationDevice] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_body(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "devices" in values:
            return values
        merged = dict(values)
        body = values.get("body")
        devices = body.get("devices") if isinstance(body, dict) else None
        merged["devices"] = devices if isinstance(devices, list) else []
        merged.setdefault("raw", dict(values))
        return merged

    @property
    def first_device(self) -> StationDevice | None:
        return self.devices[0] if self.devices else None

    def find_device(self, device_id: str) -> StationDevice | None:
        for device in self.devices:
            if device.id == device_id:
                return device
        return None


class DeviceInfo(NetatmoResultModel):
    """One station as listed by :meth:`NetatmoClient.get_available_devices`."""

    device_id: str
    station_name: str = ""
    type: str = ""
    data_types: list[str] = Field(default_factory=list)
