"""Normalization helpers.

Centralizes lenient parsing of wire payloads.  The pydantic models in
:mod:`pyfirealarm.models.readings` use these as ``BeforeValidator`` hooks,
so the store and reconciler never see raw wire values.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pyfirealarm._constants import UNKNOWN_DEVICE_ID
from pyfirealarm.exceptions import MalformedPayloadError

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "n", "off"})


def coerce_device_id(value: Any) -> str:
    """Render a wire id as the stable string key used by the store.

    ``None`` maps to the ``"unknown"`` sentinel; integral floats drop their
    decimal part so ``5`` and ``5.0`` address the same device.
    """
    if value is None:
        return UNKNOWN_DEVICE_ID
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def coerce_label(value: Any) -> str | None:
    """Display label as text; ``None`` stays ``None`` so the default applies."""
    if value is None:
        return None
    return coerce_device_id(value)


def coerce_flag(value: Any) -> bool:
    """Truthiness of a wire flag; common textual false values count as false."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def decode_payload(event: str, data: Any) -> dict[str, Any]:
    """Decode a raw event payload into a JSON object.

    Accepts JSON text/bytes or an already decoded mapping.

    Raises
    ------
    MalformedPayloadError
        When the payload is not valid JSON or not a JSON object.
    """
    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Bad encoding for {event}", event=event, data=data) from exc
    if not isinstance(data, str):
        raise MalformedPayloadError(
            f"Unsupported payload type for {event}: {type(data).__name__}",
            event=event,
            data=data,
        )
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError as exc:
        raise MalformedPayloadError(f"Bad JSON for {event}: {exc}", event=event, data=data) from exc
    if not isinstance(parsed, dict):
        raise MalformedPayloadError(f"{event} payload is not a JSON object", event=event, data=data)
    return parsed


def truncate_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return *value* shortened for log output."""
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    if isinstance(value, Mapping):
        return {str(k): truncate_for_log(v, max_string=max_string) for k, v in value.items()}
    return value
