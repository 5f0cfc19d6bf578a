"""Structured success/failure envelope for adapters.

REST handlers and tool adapters should not need to know the exception
hierarchy; :meth:`ApiResult.capture` turns any client call into a value
with a human-readable message and a coarse category.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from pynetatmo.exceptions import ErrorCategory, NetatmoError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiResult(BaseModel, Generic[T]):
    """Outcome of one client call. Never carries a stack trace."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    success: bool
    data: T | None = None
    message: str = "Success"
    category: ErrorCategory | None = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: T, message: str = "Success") -> ApiResult[T]:
        return cls(success=True, data=data, message=message)

    @classmethod
    def error(cls, message: str, category: ErrorCategory) -> ApiResult[T]:
        return cls(success=False, message=message, category=category, status_code=category.status_code)

    @classmethod
    def from_exception(cls, exc: BaseException) -> ApiResult[T]:
        if isinstance(exc, NetatmoError):
            return cls.error(str(exc), exc.category)
        return cls.error("Internal error while retrieving weather data", ErrorCategory.SERVER_ERROR)

    @classmethod
    async def capture(cls, call: Awaitable[T]) -> ApiResult[T]:
        """Await *call* and wrap its value or its failure."""
        try:
            return cls.ok(await call)
        except NetatmoError as exc:
            _logger.warning("Weather API call failed (%s): %s", exc.category.value, exc)
            return cls.from_exception(exc)
        except Exception as exc:
            _logger.exception("Unexpected error in weather API call")
            return cls.from_exception(exc)
