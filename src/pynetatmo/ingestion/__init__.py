"""Ingestion layer.

This package turns raw caller input and raw upstream payloads into
normalized queries and merged weather records.
"""

__all__: list[str] = []
