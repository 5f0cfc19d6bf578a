"""Custom exception hierarchy for pynetatmo."""

from __future__ import annotations

import enum


class ErrorCategory(enum.StrEnum):
    """Coarse failure category surfaced to adapters."""

    AUTHENTICATION_ERROR = "authentication_error"
    NOT_FOUND = "not_found"
    INVALID_PARAMETERS = "invalid_parameters"
    API_ERROR = "api_error"
    SERVER_ERROR = "server_error"

    @property
    def status_code(self) -> int:
        """HTTP status an adapter should answer with for this category."""
        return _CATEGORY_STATUS[self]


_CATEGORY_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.AUTHENTICATION_ERROR: 401,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.INVALID_PARAMETERS: 400,
    ErrorCategory.API_ERROR: 502,
    ErrorCategory.SERVER_ERROR: 500,
}


class NetatmoError(Exception):
    """Base exception for all pynetatmo errors."""

    category: ErrorCategory = ErrorCategory.SERVER_ERROR


class NetatmoConfigError(NetatmoError):
    """Invalid or missing configuration."""


class NetatmoAuthError(NetatmoError):
    """The OAuth2 refresh-token grant could not produce an access token."""

    category = ErrorCategory.AUTHENTICATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class NetatmoUpstreamError(NetatmoError):
    """Weather API failure (network, non-200, unparseable payload)."""

    category = ErrorCategory.API_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.endpoint = endpoint
        super().__init__(message)


class NetatmoNotFoundError(NetatmoError):
    """Valid response, but no station, device or data matched the request."""

    category = ErrorCategory.NOT_FOUND


class NetatmoInvalidParametersError(NetatmoError, ValueError):
    """Caller input that cannot be defaulted away."""

    category = ErrorCategory.INVALID_PARAMETERS
