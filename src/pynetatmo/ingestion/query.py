"""Resolve optional historical-query parameters to concrete values.

Everything here is pure: no I/O, and ``now`` can be injected so tests do
not depend on the wall clock.
"""

from __future__ import annotations

import logging
import re
import time
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from pynetatmo._constants import (
    DATE_FORMAT,
    DEFAULT_DAYS_BACK,
    DEFAULT_LIMIT,
    DEFAULT_SCALE,
    DEFAULT_SENSOR_TYPES,
    END_OF_DAY_OFFSET,
    SECONDS_PER_DAY,
    TIMESTAMP_FORMAT,
    VALID_SCALES,
)
from pynetatmo.exceptions import NetatmoInvalidParametersError
from pynetatmo.models.requests import HistoricalQuery

_logger = logging.getLogger(__name__)

# strptime alone would also take single-digit months and days.
_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def _now(now: float | None) -> int:
    return int(time.time() if now is None else now)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_scale(scale: str | None) -> str:
    """Default blank scales; unknown ones are passed through for upstream to judge."""
    if _is_blank(scale):
        return DEFAULT_SCALE
    value = str(scale).strip()
    if value not in VALID_SCALES:
        _logger.warning("Unknown scale %r, expected one of %s", value, ", ".join(VALID_SCALES))
    return value


def normalize_sensor_types(sensor_types: str | None) -> str:
    return DEFAULT_SENSOR_TYPES if _is_blank(sensor_types) else str(sensor_types).strip()


def normalize_limit(limit: int | str | None) -> int:
    """Positive integer limit; anything else falls back to the default."""
    if _is_blank(limit):
        return DEFAULT_LIMIT
    try:
        parsed = int(str(limit).strip())
    except ValueError:
        _logger.warning("Ignoring non-numeric limit %r", limit)
        return DEFAULT_LIMIT
    return parsed if parsed > 0 else DEFAULT_LIMIT


def parse_date(value: str | None) -> int | None:
    """Parse ``yyyy-MM-dd`` to the epoch seconds of UTC midnight."""
    if _is_blank(value):
        return None
    text = str(value).strip()
    parsed: datetime | None = None
    if _DATE_PATTERN.fullmatch(text):
        try:
            parsed = datetime.strptime(text, DATE_FORMAT).replace(tzinfo=UTC)
        except ValueError:
            parsed = None
    if parsed is None:
        _logger.warning("Failed to parse date %r with format %s", text, DATE_FORMAT)
        return None
    return int(parsed.timestamp())


def days_ago(days: int, *, now: float | None = None) -> int:
    return _now(now) - days * SECONDS_PER_DAY


def parse_begin_date(begin_date: str | None, *, now: float | None = None) -> int:
    """Midnight of *begin_date*, or seven days before *now*."""
    parsed = parse_date(begin_date)
    if parsed is not None:
        return parsed
    return days_ago(DEFAULT_DAYS_BACK, now=now)


def parse_end_date(end_date: str | None, *, now: float | None = None) -> int:
    """Last second of *end_date* (inclusive), or *now*."""
    parsed = parse_date(end_date)
    if parsed is not None:
        return parsed + END_OF_DAY_OFFSET
    return _now(now)


def parse_max_data_points(value: int | str | None) -> int | None:
    """Display cap for a history view; ``None`` means every point."""
    if _is_blank(value):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def format_timestamp(timestamp: int, fmt: str = TIMESTAMP_FORMAT) -> str:
    """Format epoch seconds in UTC."""
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime(fmt)


def normalize_query(
    *,
    device_id: str | None = None,
    module_id: str | None = None,
    scale: str | None = None,
    sensor_types: str | None = None,
    begin_date: str | None = None,
    end_date: str | None = None,
    limit: int | str | None = None,
    now: float | None = None,
) -> HistoricalQuery:
    """Build a :class:`HistoricalQuery` from raw caller input."""
    try:
        return HistoricalQuery(
            device_id=device_id,
            module_id=module_id,
            scale=normalize_scale(scale),
            sensor_types=normalize_sensor_types(sensor_types),
            date_begin=parse_begin_date(begin_date, now=now),
            date_end=parse_end_date(end_date, now=now),
            limit=normalize_limit(limit),
        )
    except ValidationError as exc:
        raise NetatmoInvalidParametersError(f"Invalid historical query: {exc}") from exc
