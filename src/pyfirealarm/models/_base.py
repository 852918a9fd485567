"""Base model for wire payloads.

Every payload model inherits from :class:`FireAlarmBaseModel` which
provides:

* A ``model_validator(mode="before")`` that drops missing-value
  sentinels (``None``, ``""``, NaN) so the field default is used.
* A ``raw`` dict that captures the original payload.
* Rejection of infinities on numeric fields.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from pyfirealarm.ingestion.normalize import coerce_flag

WireFlag = Annotated[bool, BeforeValidator(coerce_flag)]
"""Boolean taking the truthiness of the wire value."""


class FireAlarmBaseModel(BaseModel):
    """Base for event payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original payload dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_wire_values(cls, values: Any) -> Any:
        """Strip missing-value sentinels and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        original = dict(values)
        cleaned = FireAlarmBaseModel._clean_dict(original)
        # A wire key named "raw" must not shadow the stash.
        cleaned["raw"] = original
        return cleaned
