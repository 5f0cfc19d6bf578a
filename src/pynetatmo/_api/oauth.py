"""Token endpoint: refresh-token grant.

Endpoint:
  - POST /oauth2/token (form-encoded)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from pynetatmo._constants import TOKEN_ENDPOINT
from pynetatmo._redact import redact_for_log
from pynetatmo.config import NetatmoConfig
from pynetatmo.exceptions import NetatmoAuthError
from pynetatmo.models.token import TokenResponse

_logger = logging.getLogger(__name__)


def build_refresh_form(config: NetatmoConfig, refresh_token: str) -> dict[str, str]:
    """Build the form body for the ``refresh_token`` grant."""
    return {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        "client_id": config.client_id,
        "client_secret": config.client_secret,
    }


def parse_token_response(status: int, text: str) -> TokenResponse:
    """Parse the token endpoint reply.

    Parameters
    ----------
    status : int
        HTTP status of the reply.
    text : str
        Raw reply body.

    Returns
    -------
    TokenResponse
        The parsed token.

    Raises
    ------
    NetatmoAuthError
        On a non-200 status, a non-JSON body or missing token fields.
    """
    if status != 200:
        raise NetatmoAuthError(
            f"Token refresh failed with status {status}: {text[:200]}",
            status_code=status,
            body=text,
        )

    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NetatmoAuthError(
            f"Token endpoint returned invalid JSON: {text[:200]}",
            status_code=status,
            body=text,
        ) from exc

    _logger.debug("%s reply parsed=%s", TOKEN_ENDPOINT, redact_for_log(payload))
    try:
        return TokenResponse.model_validate(payload)
    except ValidationError as exc:
        raise NetatmoAuthError(
            "Token response missing access_token or expires_in",
            status_code=status,
            body=text,
        ) from exc
