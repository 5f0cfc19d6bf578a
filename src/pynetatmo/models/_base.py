"""Base models for Netatmo API payloads and library results.

Upstream payload models inherit from :class:`NetatmoBaseModel` which
provides:

* ``extra="ignore"`` so new upstream fields never break parsing.
* A ``model_validator(mode="before")`` that drops ``None`` values so the
  field default is used.
* A ``raw`` dict that captures the original payload.

Models handed back to callers inherit from :class:`NetatmoResultModel`,
which serialises with camelCase aliases (``indoorTemperature``) the way
the REST and tool adapters present them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Number = int | float
"""A measurement value as the API sends it (humidity/CO2 are ints)."""


def parse_netatmo_timestamp(value: Any) -> datetime | None:
    """Convert a Netatmo epoch-seconds timestamp to a UTC datetime.

    Returns ``None`` when the value is ``None`` or not numeric.
    """
    if value is None:
        return value
    if isinstance(value, datetime):
        return value
    try:
        ts = int(value)
    except (TypeError, ValueError):
        return None
    return datetime.fromtimestamp(ts, tz=UTC)


class NetatmoBaseModel(BaseModel):
    """Base for Netatmo API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop explicit nulls and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        # Keep a caller-supplied raw= when constructing from kwargs.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned


class NetatmoResultModel(BaseModel):
    """Base for models returned to library callers."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict[str, Any]:
        """camelCase dict without absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
