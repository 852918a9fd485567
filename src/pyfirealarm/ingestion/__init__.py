"""Ingestion layer.

This package validates event payloads and reconciles them into the
device store.
"""

__all__: list[str] = []
