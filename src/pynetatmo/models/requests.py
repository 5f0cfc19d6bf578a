"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are built by :mod:`pynetatmo.ingestion.query` from raw caller input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pynetatmo._constants import DEFAULT_LIMIT, DEFAULT_SCALE, DEFAULT_SENSOR_TYPES
from pynetatmo.ingestion.normalize import split_csv


class _FrozenRequest(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )


class HistoricalQuery(_FrozenRequest):
    """Fully resolved historical query; every optional input has a value."""

    device_id: str | None = None
    module_id: str | None = None
    scale: str = DEFAULT_SCALE
    sensor_types: str = DEFAULT_SENSOR_TYPES
    date_begin: int
    date_end: int
    limit: int = Field(default=DEFAULT_LIMIT, ge=1)

    @field_validator("device_id", "module_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @property
    def sensor_type_list(self) -> list[str]:
        return split_csv(self.sensor_types)


class MeasureRequest(_FrozenRequest):
    """Query parameters of one ``getmeasure`` call."""

    device_id: str
    module_id: str | None = None
    scale: str
    sensor_types: str
    date_begin: int
    date_end: int
    limit: int = Field(ge=1)
    optimize: bool = True
    real_time: bool = True

    @field_validator("device_id")
    @classmethod
    def _device_non_empty(cls, value: str) -> str:
        device_id = value.strip()
        if not device_id:
            raise ValueError("device_id must be non-empty")
        return device_id

    @classmethod
    def from_query(cls, query: HistoricalQuery, *, device_id: str, module_id: str | None) -> MeasureRequest:
        return cls(
            device_id=device_id,
            module_id=module_id,
            scale=query.scale,
            sensor_types=query.sensor_types,
            date_begin=query.date_begin,
            date_end=query.date_end,
            limit=query.limit,
        )

    def to_params(self) -> dict[str, str]:
        """Query-string parameters; an absent ``module_id`` is left out."""
        params: dict[str, str] = {
            "device_id": self.device_id,
            "scale": self.scale,
            "type": self.sensor_types,
            "date_begin": str(self.date_begin),
            "date_end": str(self.date_end),
            "limit": str(self.limit),
            "optimize": "true" if self.optimize else "false",
            "real_time": "true" if self.real_time else "false",
        }
        if self.module_id:
            params["module_id"] = self.module_id
        return params
