"""Scrub OAuth2 secrets from payloads before they reach a DEBUG log.

Token replies carry the access and refresh tokens, the refresh form
carries the client secret, and request headers carry the bearer token.
Measurement replies are harmless but long, so their arrays are shortened.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"

# Compared after lower-casing and dropping underscores.
_SECRET_KEYS: frozenset[str] = frozenset(
    {"accesstoken", "refreshtoken", "clientsecret", "authorization", "password", "mail", "cookie"}
)

_MAX_DEPTH = 20


def _is_secret(key: object) -> bool:
    return str(key).lower().replace("_", "") in _SECRET_KEYS


def _shorten(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}…<truncated>"


def redact_for_log(value: Any, *, max_string: int = 512, max_items: int = 20) -> Any:
    """Copy *value* with secrets masked and oversized parts cut down.

    Parameters
    ----------
    value : Any
        Decoded JSON, a query mapping, or anything else worth logging.
    max_string : int
        Strings longer than this are cut and marked ``<truncated>``.
    max_items : int
        Sequences keep this many items plus a ``<+N items>`` marker.

    Returns
    -------
    Any
        A new structure; *value* is never modified.
    """

    def walk(node: Any, depth: int) -> Any:
        if depth > _MAX_DEPTH:
            return "<max-depth>"
        if node is None or isinstance(node, (bool, int, float)):
            return node
        if isinstance(node, str):
            return _shorten(node, max_string)
        if isinstance(node, (bytes, bytearray)):
            return f"<bytes:{len(node)}b>"
        if isinstance(node, Mapping):
            return {str(k): REDACTED if _is_secret(k) else walk(v, depth + 1) for k, v in node.items()}
        if isinstance(node, Sequence):
            kept = [walk(item, depth + 1) for item in list(node)[:max_items]]
            hidden = len(node) - max_items
            if hidden > 0:
                kept.append(f"<+{hidden} items>")
            return kept
        return repr(node)

    return walk(value, 0)
