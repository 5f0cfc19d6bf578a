"""Historical measurement models for the ``/api/getmeasure`` response."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pynetatmo.ingestion.normalize import safe_number
from pynetatmo.models._base import Number

_logger = logging.getLogger(__name__)

Point = tuple[Number | None, ...]
"""One sample: sensor values in the order of the requested ``type`` list."""


class MeasurementSeries(BaseModel):
    """One evenly spaced run of samples.

    ``values[i]`` was measured at ``begin_time + i * step_time``. The
    order of ``values`` is the upstream order and is never changed; the
    index is the only key that relates two sibling series.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    begin_time: int
    step_time: int = Field(ge=0)
    values: tuple[Point, ...] = ()
    status: str | None = None
    """Top-level ``status`` of the reply this run came from."""

    @field_validator("values", mode="before")
    @classmethod
    def _coerce_values(cls, value: Any) -> tuple[Point, ...]:
        if not isinstance(value, (list, tuple)):
            raise ValueError("value must be a list")
        points: list[Point] = []
        for item in value:
            if isinstance(item, (list, tuple)):
                points.append(tuple(safe_number(v) for v in item))
            else:
                # Single-sensor queries may come back as bare scalars.
                points.append((safe_number(item),))
        return tuple(points)

    def __len__(self) -> int:
        return len(self.values)

    def timestamp_at(self, index: int) -> int:
        return self.begin_time + index * self.step_time

    def points(self) -> list[Point]:
        """Each sample prefixed with its computed timestamp."""
        return [(self.timestamp_at(i), *value) for i, value in enumerate(self.values)]


def parse_measurement_series(payload: Any) -> MeasurementSeries | None:
    """Extract the first measurement run from a ``getmeasure`` response.

    Expects ``{"body": [{"beg_time": ..., "step_time": ..., "value": [...]}]}``.
    Returns ``None`` when the structure is missing any of the three
    fields; the caller decides whether that is fatal.
    """
    if not isinstance(payload, dict):
        return None
    body = payload.get("body")
    if not isinstance(body, list) or not body:
        return None
    first = body[0]
    if not isinstance(first, dict):
        return None
    if first.get("beg_time") is None or first.get("step_time") is None or first.get("value") is None:
        return None
    if len(body) > 1:
        _logger.debug("getmeasure returned %d runs; using the first", len(body))
    try:
        return MeasurementSeries(
            begin_time=first["beg_time"],
            step_time=first["step_time"],
            values=first["value"],
            status=payload.get("status"),
        )
    except ValidationError:
        _logger.debug("Unparseable measurement run keys=%s", list(first.keys()), exc_info=True)
        return None
