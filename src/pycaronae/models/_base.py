"""Base model and timestamp helpers for Caronae records.

Every Caronae record model inherits from :class:`CaronaeBaseModel`
which provides:

* frozen instances, so a stored record can only be replaced, never
  mutated in place;
* ``extra="ignore"`` so unknown remote keys are tolerated;
* a ``model_validator(mode="before")`` that drops ``None`` and empty
  string values so the field default is used instead.

Naive date/times coming from the remote are wall-clock values in the
service's time zone.  Pass ``context={"tz": ZoneInfo(...)}`` to
``model_validate`` to interpret them; without it they are read as UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, model_validator


def context_zone(info: ValidationInfo | None) -> tzinfo:
    """Return the time zone passed in the validation context, or UTC."""
    context = info.context if info is not None else None
    if isinstance(context, dict):
        zone = context.get("tz")
        if isinstance(zone, tzinfo):
            return zone
    return UTC


def parse_caronae_datetime(value: Any, zone: tzinfo = UTC) -> datetime:
    """Coerce an ISO string or datetime into a tz-aware UTC datetime.

    Naive values are interpreted in *zone*.  Raises :class:`ValueError`
    for anything that is not a date/time.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"not a date/time: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed.astimezone(UTC)


class CaronaeBaseModel(BaseModel):
    """Base for Caronae record models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None and value != ""}
