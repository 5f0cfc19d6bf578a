"""OAuth2 token endpoint response model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TokenResponse(BaseModel):
    """Body returned by ``POST /oauth2/token`` on success.

    Parameters
    ----------
    access_token : str
        Short-lived bearer token.
    expires_in : int
        Token lifetime in seconds.
    refresh_token : str or None
        Rotated refresh token, when the provider issues a new one.
    scope : list[str]
        Granted scopes.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    access_token: str = Field(min_length=1)
    expires_in: int = Field(ge=0)
    refresh_token: str | None = None
    scope: list[str] = Field(default_factory=list)

    @field_validator("scope", mode="before")
    @classmethod
    def _coerce_scope(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return [str(item) for item in value]
