"""Caller-facing weather models."""

from __future__ import annotations

from pydantic import Field

from pynetatmo.models._base import NetatmoResultModel, Number
from pynetatmo.models.measure import Point


class CurrentWeatherData(NetatmoResultModel):
    """Latest readings of the first station and its first module."""

    station_name: str = ""
    indoor_temperature: float | None = None
    indoor_humidity: int | None = None
    pressure: float | None = None
    co2: int | None = None
    noise: int | None = None
    time_utc: int | None = None
    outdoor_temperature: float | None = None
    outdoor_humidity: int | None = None
    outdoor_max_temperature: float | None = None
    outdoor_min_temperature: float | None = None


class MergedRecord(NetatmoResultModel):
    """One indoor sample, joined with the outdoor sample at the same position."""

    timestamp: str
    """``yyyy-MM-dd HH:mm`` in UTC."""
    indoor_temperature: Number | None = None
    indoor_humidity: Number | None = None
    indoor_pressure: Number | None = None
    outdoor_temperature: Number | None = None
    outdoor_humidity: Number | None = None

    @property
    def has_outdoor(self) -> bool:
        return self.outdoor_temperature is not None or self.outdoor_humidity is not None


class OutdoorModuleData(NetatmoResultModel):
    """Outdoor context gathered alongside an indoor series."""

    module_id: str | None = None
    module_name: str | None = None
    current_temperature: float | None = None
    current_humidity: int | None = None
    begin_time: int | None = None
    step_time: int | None = None
    points: list[Point] | None = None
    """``(timestamp, temperature, humidity)`` tuples; ``None`` when unavailable."""


class HistoricalWeatherData(NetatmoResultModel):
    """Merged indoor/outdoor history plus the resolved request parameters."""

    device_id: str
    scale: str
    sensor_types: list[str] = Field(default_factory=list)
    status: str | None = None
    begin_timestamp: int
    end_timestamp: int
    begin_time: str
    end_time: str
    step_time: int
    values: list[MergedRecord] = Field(default_factory=list)
    total_data_points: int = 0
    outdoor_module_id: str | None = None
    outdoor_module_name: str | None = None
    outdoor_temperature: float | None = None
    outdoor_humidity: int | None = None

    def truncated(self, max_points: int | None) -> HistoricalView:
        """Keep the first *max_points* records; ``None`` or ``<= 0`` keeps all."""
        limited = max_points is not None and 0 < max_points < len(self.values)
        values = self.values[:max_points] if limited else list(self.values)
        return HistoricalView(
            data=self,
            values=values,
            limited_data_points=limited,
            displayed_data_points=len(values),
        )


class HistoricalView(NetatmoResultModel):
    """A :class:`HistoricalWeatherData` cut to at most N records for display."""

    data: HistoricalWeatherData
    values: list[MergedRecord]
    limited_data_points: bool
    displayed_data_points: int

    def to_dict(self) -> dict[str, object]:
        payload = self.data.to_dict()
        payload["values"] = [record.to_dict() for record in self.values]
        payload["limitedDataPoints"] = self.limited_data_points
        payload["displayedDataPoints"] = self.displayed_data_points
        return payload
