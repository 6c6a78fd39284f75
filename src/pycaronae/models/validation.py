"""Ride date validation result."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictBool, StrictStr


class RideDateValidation(BaseModel):
    """Answer of the duplicate-ride check for a proposed date/direction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    valid: StrictBool
    status: StrictStr
    """Human-readable status (e.g. ``"possible_duplicate"``)."""
